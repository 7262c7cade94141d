"""
Engine and application settings using Pydantic.

EngineConfig holds every numeric tunable of the animation engine and is
frozen: to change behaviour, build a new one and swap it in whole.
AppSettings configures the desktop host and is loaded from environment
variables with .env file support.
"""

import logging
import math
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Above this tension*friction product the spring no longer settles
# reliably at the frame rates we target.
STABILITY_BOUND = 0.08


class EngineConfig(BaseModel):
    """Numeric tunables for one engine instance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Grid
    spacing_x: float = Field(default=40.0, gt=0)
    spacing_y: float = Field(default=40.0, gt=0)
    pad: int = Field(default=2, ge=0)  # Extra cols/rows for edge bleed
    centered: bool = True

    # Noise
    seed: Optional[int] = None
    noise_scale: float = Field(default=0.003, gt=0)  # Spatial frequency
    noise_speed: float = Field(default=0.0002, ge=0)  # Per millisecond
    amplitude: float = Field(default=20.0, ge=0)  # Max displacement (px)
    angle_gain: float = Field(default=math.pi, ge=0, le=math.pi)
    horizontal_displacement: bool = False
    wave_amp_x: float = Field(default=1.0, ge=0)
    wave_amp_y: float = Field(default=1.0, ge=0)

    # Secondary vector warp
    vector_warp: bool = True
    warp_scale: float = Field(default=0.0015, gt=0)
    warp_speed: float = Field(default=0.6, ge=0)  # Relative to noise_speed
    warp_amplitude: float = Field(default=30.0, ge=0)
    warp_phase: float = 100.0  # Offset between the wx/wy samples

    # Domain warp
    domain_warp: bool = True
    domain_warp_scale: float = Field(default=0.001, gt=0)
    domain_warp_speed: float = Field(default=0.5, ge=0)
    domain_warp_amplitude: float = Field(default=40.0, ge=0)

    # Ridge modulation
    ridge: bool = True
    ridge_scale: float = Field(default=0.002, gt=0)
    ridge_speed: float = Field(default=0.8, ge=0)
    ridge_power: float = Field(default=2.0, ge=1.0)
    ridge_strength: float = Field(default=0.5, ge=0, le=1.0)

    # Spring
    tension: float = Field(default=0.03, gt=0)
    friction: float = Field(default=0.85, gt=0, lt=1.0)
    max_offset: float = Field(default=120.0, gt=0)

    # Cursor
    influence_radius: float = Field(default=150.0, gt=0)
    cursor_strength: float = Field(default=0.5, ge=0)
    radius_speed_gain: float = Field(default=0.0, ge=0)  # Radius growth per px/frame
    directional_bias: bool = False
    pointer_smoothing: float = Field(default=0.0, ge=0, lt=1.0)  # 0 = raw deltas
    max_pointer_speed: float = Field(default=60.0, gt=0)
    pointer_idle_frames: int = Field(default=4, ge=1)  # Frames a resting pointer keeps pushing

    # Audio response
    audio_reactive: bool = True
    energy_exponent: float = Field(default=2.0, gt=1.0)
    audio_amplitude_multiplier: float = Field(default=2.0, ge=0)
    audio_speed_multiplier: float = Field(default=2.0, ge=0)
    audio_smoothing: float = Field(default=0.15, gt=0, le=1.0)

    # Timing
    max_frame_ms: float = Field(default=100.0, gt=0, le=1000.0)
    reference_frame_ms: float = Field(default=1000.0 / 60.0, gt=0)
    frame_rate_independent: bool = True

    # Rendering
    curve_mode: Literal["line", "quadratic"] = "quadratic"
    line_width: float = Field(default=1.0, gt=0)

    @model_validator(mode="after")
    def _check_spring_stability(self) -> "EngineConfig":
        product = self.tension * self.friction
        if product >= STABILITY_BOUND:
            raise ValueError(
                f"tension*friction = {product:.4f} must stay below "
                f"{STABILITY_BOUND} for the spring to settle"
            )
        return self

    @property
    def stability_margin(self) -> float:
        """Distance of tension*friction below the stability bound."""
        return STABILITY_BOUND - self.tension * self.friction

    def replace(self, **changes: Any) -> "EngineConfig":
        """Return a validated copy with ``changes`` applied."""
        data = self.model_dump()
        data.update(changes)
        return EngineConfig.model_validate(data)

    @classmethod
    def unchecked(cls, **fields: Any) -> "EngineConfig":
        """Build a config without validation.

        Skips the spring stability check. Only meant for demonstrating
        what happens outside the safe region.
        """
        config = cls.model_construct(**fields)
        logger.warning(
            f"Unchecked EngineConfig: tension*friction = "
            f"{config.tension * config.friction:.4f}"
        )
        return config

    @classmethod
    def preset(cls, name: str) -> "EngineConfig":
        """Get a named preset. Unknown names resolve to ``default``."""
        overrides = PRESETS.get(name)
        if overrides is None:
            logger.debug(f"Unknown preset '{name}', using default")
            overrides = PRESETS["default"]
        return cls(**overrides)


# Per-station looks
PRESETS: dict[str, dict[str, Any]] = {
    "default": {},
    "no-selection": {
        "spacing_x": 12.0,
        "spacing_y": 36.0,
        "noise_speed": 0.0003,
        "amplitude": 32.0,
        "horizontal_displacement": True,
        "wave_amp_x": 2.0,
        "friction": 0.9,
        "tension": 0.01,
        "influence_radius": 120.0,
        "line_width": 0.8,
        "audio_amplitude_multiplier": 2.0,
    },
    "classicfm": {
        "spacing_x": 14.0,
        "spacing_y": 40.0,
        "noise_speed": 0.00022,
        "amplitude": 28.0,
        "horizontal_displacement": True,
        "wave_amp_x": 2.0,
        "friction": 0.9,
        "tension": 0.01,
        "influence_radius": 120.0,
        "line_width": 0.7,
        "audio_amplitude_multiplier": 1.5,
    },
    "reprezent": {
        "spacing_x": 12.0,
        "spacing_y": 36.0,
        "noise_speed": 0.00037,
        "amplitude": 35.0,
        "horizontal_displacement": True,
        "wave_amp_x": 2.0,
        "friction": 0.9,
        "tension": 0.01,
        "influence_radius": 120.0,
        "line_width": 0.9,
        "audio_amplitude_multiplier": 3.0,
    },
}


class AppSettings(BaseSettings):
    """Desktop host settings."""

    model_config = SettingsConfigDict(
        env_prefix="WAVEGRID_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Window
    window_width: int = Field(default=1280, gt=0)
    window_height: int = Field(default=720, gt=0)
    fullscreen: bool = False
    fps: int = Field(default=60, gt=0)

    # Engine
    theme: str = "default"
    preset: str = "default"
    seed: Optional[int] = None
    resize_debounce_ms: float = Field(default=100.0, ge=0)

    # Energy source when no audio collaborator is attached
    idle_energy: bool = False

    # Extra themes, YAML mapping of name -> colors
    themes_file: Optional[Path] = None

    def engine_config(self) -> EngineConfig:
        """Build the engine config for the selected preset."""
        config = EngineConfig.preset(self.preset)
        if self.seed is not None:
            config = config.replace(seed=self.seed)
        return config


@lru_cache
def get_settings() -> AppSettings:
    """Get cached settings instance."""
    return AppSettings()
