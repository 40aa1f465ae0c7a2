import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def setup_logger(
    name: str = "mcqstudy", logs_dir: str | None = "logs", level: int | str = logging.INFO
) -> logging.Logger:
    """
    Configure the package logger once: a stream handler, plus app.log under
    logs_dir when one is given. Calling it again only updates the level.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not logger.handlers:
        fmt = logging.Formatter(LOG_FORMAT)
        ch = logging.StreamHandler()
        ch.setFormatter(fmt)
        logger.addHandler(ch)
        if logs_dir:
            Path(logs_dir).mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(Path(logs_dir) / "app.log", encoding="utf-8")
            fh.setFormatter(fmt)
            logger.addHandler(fh)
    return logger
