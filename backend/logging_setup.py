# logging_setup.py
import logging
import os
import sys
from pathlib import Path


class _ConsoleNoiseFilter(logging.Filter):
    """Keep our own modules, but only show warnings from werkzeug/sqlalchemy on the console."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(("werkzeug", "sqlalchemy")):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    console_level: int | str | None = None,
    log_dir: str | Path | None = None,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Console handler on stderr, plus a full log file when ``log_dir`` (or
    BULLET_LOG_DIR) is set. Call once, before the app starts serving.
    """
    console_level = console_level or os.getenv("BULLET_LOG_LEVEL", "INFO")
    if isinstance(console_level, str):
        console_level = console_level.upper()
    log_dir = log_dir or os.getenv("BULLET_LOG_DIR")

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # Remove any pre-existing handlers to avoid duplicates.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    ch.addFilter(_ConsoleNoiseFilter())
    root.addHandler(ch)

    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(log_dir / "bullet.log"), encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    logging.captureWarnings(True)
