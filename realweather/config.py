"""Configuration loading.

``config.toml`` is parsed with ``tomllib`` and validated into
``Configuration``. Invalid individual values are clamped by the models;
only an unreadable file or a structurally invalid one is fatal.
"""

from __future__ import annotations

import logging
import tomllib
from importlib import resources
from pathlib import Path

from pydantic import ValidationError

from realweather.contracts.config import Configuration
from realweather.errors import ConfigValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config.toml")
DEFAULT_TEMPLATE = "config.default.toml"


def default_config_text() -> str:
    return resources.files("realweather").joinpath(DEFAULT_TEMPLATE).read_text(encoding="utf-8")


def write_default_config(path: Path) -> None:
    path = Path(path)
    try:
        path.write_text(default_config_text(), encoding="utf-8")
    except OSError as exc:
        raise ConfigValidationError(f"unable to create {path}: {exc}") from exc


def parse_config(text: str, source: str = "<config>") -> Configuration:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigValidationError(f"error decoding {source}: {exc}") from exc
    try:
        return Configuration.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(f"invalid configuration in {source}: {exc}") from exc


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> Configuration:
    """Read and validate ``path``.

    When the file does not exist the default template is written there and
    ``ConfigValidationError`` is raised so the user can edit it first.
    """
    path = Path(path)
    if not path.exists():
        logger.info("Config does not exist, creating one...")
        write_default_config(path)
        raise ConfigValidationError(
            f"default config created at {path}; configure it with your desired settings, then rerun"
        )
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigValidationError(f"error opening {path}: {exc}") from exc

    config = parse_config(text, str(path))
    logger.debug("Loaded configuration from %s", path)
    return config
