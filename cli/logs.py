"""Logging setup for the command line tools."""

import logging
from pathlib import Path


def setup_logging(log_dir: Path, level: str = "INFO", log_name: str = "plugins.log"):
    """Log to a file, keeping the console to warnings and above.

    INFO records stay out of the terminal so they do not interleave with
    interactive prompts.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    file_handler = logging.FileHandler(log_dir / log_name, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    ))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)
