"""
Dedicated session logger for compass debugging.

Splits the compass log channels into separate files under the session
directory:

- sensors.log: sensor callbacks, registration, accuracy changes
- fusion.log: bearings and degenerate orientations
- location.log: location fixes and declination lookups

Files receive DEBUG and above; the console only WARNING and above.

Usage:
    from compass.telemetry.loggers.compass_logger import get_compass_logger

    compass_logger = get_compass_logger(session_dir=telemetry.output_dir)
    compass_logger.fusion.debug("Bearing: 12.0°")
"""

import logging
from datetime import datetime
from pathlib import Path

CHANNELS = {
    "sensors": "sensors.log",
    "fusion": "fusion.log",
    "location": "location.log",
}


class CompassLogger:
    """Singleton logger wiring the compass.* channels to session files."""

    _instance = None
    _initialized = False

    def __new__(cls, session_dir: Path = None):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, session_dir: Path = None):
        if self._initialized:
            return

        if session_dir is None:
            timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")
            self.log_dir = Path("logs") / f"session_{timestamp}"
        else:
            self.log_dir = Path(session_dir)

        self.log_dir.mkdir(parents=True, exist_ok=True)

        for name, filename in CHANNELS.items():
            self._setup_logger(name, filename)

        self._initialized = True

    def _setup_logger(self, name: str, filename: str):
        """Setup individual logger with file handler."""
        logger = logging.getLogger(f"compass.{name}")
        logger.setLevel(logging.DEBUG)
        logger.propagate = False

        logger.handlers.clear()

        fh = logging.FileHandler(self.log_dir / filename, mode='w', encoding='utf-8')
        fh.setLevel(logging.DEBUG)

        ch = logging.StreamHandler()
        ch.setLevel(logging.WARNING)

        formatter = logging.Formatter(
            '%(asctime)s.%(msecs)03d [%(levelname)s] %(message)s',
            datefmt='%H:%M:%S'
        )
        fh.setFormatter(formatter)
        ch.setFormatter(formatter)

        logger.addHandler(fh)
        logger.addHandler(ch)

        setattr(self, name, logger)

    def close(self):
        """Close all handlers and release the singleton."""
        for name in CHANNELS:
            logger = getattr(self, name, None)
            if logger:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)
                logger.propagate = True
        type(self)._instance = None
        type(self)._initialized = False


_compass_logger = None


def get_compass_logger(session_dir: Path = None) -> CompassLogger:
    """Get or create the compass logger instance."""
    global _compass_logger
    if _compass_logger is None:
        _compass_logger = CompassLogger(session_dir=session_dir)
    return _compass_logger


def close_compass_logger() -> None:
    """Close the global compass logger if one is open."""
    global _compass_logger
    if _compass_logger is not None:
        _compass_logger.close()
        _compass_logger = None
