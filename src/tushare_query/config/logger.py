import os
import sys
from pathlib import Path
from typing import Literal, TypeAlias

from loguru import logger

Level: TypeAlias = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logger(
    level: Level = "INFO",
    log_path: str | Path | None = None,
):
    """Configure the shared logger.

    stderr is always a sink. A rotating file sink is added when ``log_path``
    is given.
    """
    log_format = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message}"
    rotation = "100 MB"
    retention = "30 days"

    logger.remove()
    logger.add(sys.stderr, level=level, format=log_format)

    if log_path is not None:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_path),
            rotation=rotation,
            retention=retention,
            level=level,
            format=log_format,
        )

    return logger


def _env_log_path() -> Path | None:
    log_dir = os.environ.get("TUSHARE_LOG_DIR")
    if not log_dir:
        return None
    return Path(log_dir) / "tushare_{time}.log"


log = setup_logger(
    level=os.environ.get("TUSHARE_LOG_LEVEL", "INFO").upper(),  # type: ignore[arg-type]
    log_path=_env_log_path(),
)
