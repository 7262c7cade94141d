"""Energy signal adapters for WAVEGRID."""

from wavegrid.audio.energy import (
    CallableEnergySource,
    EnergySource,
    NullEnergySource,
    OscillatingEnergySource,
    SmoothedEnergySource,
    SpectrumEnergySource,
    as_energy_source,
    clamp_energy,
    spectrum_energy,
)

__all__ = [
    "EnergySource",
    "NullEnergySource",
    "CallableEnergySource",
    "SmoothedEnergySource",
    "SpectrumEnergySource",
    "OscillatingEnergySource",
    "as_energy_source",
    "clamp_energy",
    "spectrum_energy",
]
