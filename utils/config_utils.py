import json
import logging
import os
from typing import Optional

from pydantic import ValidationError

from config import Config


CONFIG_NAME = ".polldot.json"
MIN_INTERVAL = 10.0  # seconds
logger = logging.getLogger("polldot:config")

__all__ = [
    "CONFIG_NAME", "MIN_INTERVAL", "ConfigError", "HomelessError", "VanillaConfigError",
    "home_dir", "config_filename", "default_config", "read_config", "write_config",
    "load_config", "resolve_interval",
]


class ConfigError(Exception):
    pass


class HomelessError(ConfigError):
    def __init__(self):
        super().__init__("HOME must be set")


class VanillaConfigError(ConfigError):
    """
    Raised when no configuration file was found and a new one was written
    from the defaults.
    """

    def __init__(self, path: str):
        self.path = path
        super().__init__("new vanilla configuration file created. Please edit this file: " + path)


def home_dir() -> str:
    home = os.environ.get("HOME", "")
    if not home:
        raise HomelessError()
    return home


def config_filename() -> str:
    return os.path.join(home_dir(), CONFIG_NAME)


def default_config() -> Config:
    return Config()


def read_config(path: str) -> Config:
    with open(path, encoding="utf-8") as f:
        data = f.read()
    try:
        return Config.model_validate_json(data)
    except ValidationError as e:
        raise ConfigError(f"invalid configuration in {path}: {e}") from e


def write_config(cfg: Config, path: str):
    data = cfg.model_dump(by_alias=True)
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    os.replace(tmp, path)
    logger.info("Config saved to %s", path)


def load_config() -> Config:
    """
    Load the configuration from disk. If the file does not exist, the
    defaults are written to it and VanillaConfigError is raised so the
    operator gets to edit it first.
    """
    path = config_filename()
    try:
        return read_config(path)
    except FileNotFoundError:
        write_config(default_config(), path)
        raise VanillaConfigError(path)


def resolve_interval(cfg: Config, minimum: float = MIN_INTERVAL, override: Optional[float] = None) -> float:
    """
    Effective poll interval in seconds. Values below `minimum` are clamped
    to it.
    """
    interval = cfg.interval if override is None else override
    if interval < minimum:
        logger.warning("Poll interval %ss is below the minimum, using %ss", interval, minimum)
        return minimum
    return interval
