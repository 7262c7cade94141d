"""Configuration for WAVEGRID."""

from wavegrid.config.settings import (
    PRESETS,
    STABILITY_BOUND,
    AppSettings,
    EngineConfig,
    get_settings,
)

__all__ = ["PRESETS", "STABILITY_BOUND", "AppSettings", "EngineConfig", "get_settings"]
