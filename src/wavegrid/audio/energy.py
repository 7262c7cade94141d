"""
Energy signal sources.

The engine polls one EnergySource per frame for a scalar in [0, 1].
Audio capture and analysis live outside the engine; these classes only
adapt whatever the host provides. Anything missing, failing or
non-finite reads as 0.
"""

from abc import ABC, abstractmethod
from typing import Callable, Optional, Sequence
import logging
import math
import time

import numpy as np

logger = logging.getLogger(__name__)

# Spectrum bands, in analyser bins
BASS_BINS = (0, 10)
MID_BINS = (10, 40)
BASS_WEIGHT = 0.7
MID_WEIGHT = 0.3


def clamp_energy(value: Optional[float]) -> float:
    """Clamp to [0, 1]; None and non-finite values become 0."""
    if value is None:
        return 0.0
    try:
        value = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(value):
        return 0.0
    return min(1.0, max(0.0, value))


class EnergySource(ABC):
    """Abstract energy signal."""

    @abstractmethod
    def get_energy(self) -> float:
        """Current energy in [0, 1]."""
        ...


class NullEnergySource(EnergySource):
    """Silence. Used when no audio collaborator is attached."""

    def get_energy(self) -> float:
        return 0.0


class CallableEnergySource(EnergySource):
    """Wraps a plain ``() -> float`` provided by the host."""

    def __init__(self, func: Callable[[], Optional[float]]):
        self._func = func
        self._failed = False

    def get_energy(self) -> float:
        try:
            value = self._func()
        except Exception as e:
            # Log once; a broken provider would otherwise flood every frame
            if not self._failed:
                logger.warning(f"Energy provider failed, treating as silence: {e}")
                self._failed = True
            return 0.0
        self._failed = False
        return clamp_energy(value)


class SmoothedEnergySource(EnergySource):
    """Exponential moving average over another source.

    Args:
        source: Raw energy source
        alpha: Weight of the newest sample (lower = smoother)
    """

    def __init__(self, source: EnergySource, alpha: float = 0.15):
        self.source = source
        self.alpha = min(1.0, max(0.0, alpha))
        self._value = 0.0

    @property
    def value(self) -> float:
        return self._value

    def get_energy(self) -> float:
        raw = clamp_energy(self.source.get_energy())
        self._value = self.alpha * raw + (1.0 - self.alpha) * self._value
        return self._value

    def reset(self) -> None:
        self._value = 0.0


class SpectrumEnergySource(EnergySource):
    """Energy from a precomputed byte frequency spectrum.

    The host supplies the analyser output (0-255 per bin); this blends
    bass and low-mid bands into a single value.

    Args:
        spectrum: Returns the latest spectrum, or None when unavailable
    """

    def __init__(self, spectrum: Callable[[], Optional[Sequence[int]]]):
        self._spectrum = spectrum

    def get_energy(self) -> float:
        try:
            data = self._spectrum()
        except Exception as e:
            logger.debug(f"Spectrum unavailable: {e}")
            return 0.0
        if data is None:
            return 0.0
        return spectrum_energy(data)


def spectrum_energy(data: Sequence[int]) -> float:
    """Weighted bass/mid energy of a byte spectrum, in [0, 1]."""
    bins = np.asarray(data, dtype=np.float64)
    if bins.size == 0:
        return 0.0

    def band_mean(lo: int, hi: int) -> float:
        band = bins[lo:hi]
        # Missing bins count as silent, the divisor stays the band width
        return float(np.nansum(band)) / (hi - lo) / 255.0

    bass = band_mean(*BASS_BINS)
    mid = band_mean(*MID_BINS)
    return clamp_energy(bass * BASS_WEIGHT + mid * MID_WEIGHT)


class OscillatingEnergySource(EnergySource):
    """Gentle 0.15-0.25 oscillation for hosts that play audio without an analyser.

    Args:
        clock: Returns seconds; defaults to time.monotonic
    """

    def __init__(
        self,
        base: float = 0.20,
        depth: float = 0.05,
        rate: float = 0.5,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.base = base
        self.depth = depth
        self.rate = rate
        self._clock = clock or time.monotonic

    def get_energy(self) -> float:
        t = self._clock()
        return clamp_energy(self.base + self.depth * math.sin(t * self.rate))


def as_energy_source(
    source: Optional[EnergySource | Callable[[], Optional[float]]],
) -> EnergySource:
    """Resolve an optional source or callable into an EnergySource."""
    if source is None:
        return NullEnergySource()
    if isinstance(source, EnergySource):
        return source
    if callable(source):
        return CallableEnergySource(source)
    raise TypeError(f"Not an energy source: {source!r}")
