import logging
import os
from typing import Optional

from .config_utils import home_dir


LOG_NAME = "polldot.log"
LOG_FORMAT = "[%(process)d] %(asctime)s %(message)s"
LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"

__all__ = ["LOG_NAME", "log_filename", "init_log"]


def log_filename() -> str:
    return os.path.join(home_dir(), LOG_NAME)


def init_log(path: Optional[str] = None, level: int = logging.INFO) -> logging.Handler:
    """
    Append log lines to `path` (default ~/polldot.log), each prefixed with
    the process id.
    """
    fh = logging.FileHandler(path or log_filename(), encoding="utf-8")
    fh.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(fh)
    return fh
