"""
Simulator entry point.

Runs a WaveGrid in a desktop pygame window.
"""

import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from wavegrid.animation.loop import AsyncioFrameScheduler
from wavegrid.audio.energy import OscillatingEnergySource
from wavegrid.config.settings import AppSettings, get_settings
from wavegrid.core.events import EventBus
from wavegrid.engine.wave_grid import WaveGrid
from wavegrid.graphics.themes import ThemeRegistry
from wavegrid.simulator.window import SimulatorWindow, WindowConfig

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False, log_file: Path = Path("simulator.log")) -> None:
    """Configure logging for simulator with file output."""
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )
    level = logging.DEBUG if debug else logging.INFO

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # File handler - truncate on each run for fresh logs
    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(console_handler)
    root_logger.addHandler(file_handler)

    # The grid and surfaces log per rebuild; keep them quiet unless debugging
    if not debug:
        logging.getLogger("wavegrid.grid").setLevel(logging.INFO)
        logging.getLogger("wavegrid.engine.spring").setLevel(logging.INFO)

    logging.info(f"Logging to file: {log_file}")


def build_engine(settings: AppSettings) -> WaveGrid:
    """Assemble a WaveGrid from host settings."""
    themes = ThemeRegistry()
    if settings.themes_file is not None:
        count = themes.load_file(settings.themes_file)
        logger.info(f"Loaded {count} themes from {settings.themes_file}")

    energy = OscillatingEnergySource() if settings.idle_energy else None

    return WaveGrid(
        settings.engine_config(),
        energy_source=energy,
        themes=themes,
        theme=settings.theme,
        scheduler=AsyncioFrameScheduler(fps=settings.fps),
        event_bus=EventBus(),
        resize_debounce_ms=settings.resize_debounce_ms,
    )


async def run(settings: AppSettings) -> None:
    """Build the engine and run the window until it closes."""
    engine = build_engine(settings)
    window = SimulatorWindow(
        engine,
        WindowConfig(
            width=settings.window_width,
            height=settings.window_height,
            fullscreen=settings.fullscreen,
        ),
    )
    await window.run()


def main() -> None:
    """Main entry point for simulator."""
    load_dotenv()
    settings = get_settings()
    setup_logging(settings.debug)

    logger.info("=" * 50)
    logger.info("WAVEGRID Simulator Starting")
    logger.info("=" * 50)
    logger.info(f"Preset: {settings.preset}, theme: {settings.theme}")
    logger.info("")
    logger.info("Controls:")
    logger.info("  1-4    - Theme")
    logger.info("  SPACE  - Pause / resume")
    logger.info("  S      - Screenshot")
    logger.info("  Q/ESC  - Quit")
    logger.info("")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Simulator stopped by user")
    except Exception as e:
        logger.exception(f"Simulator error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
