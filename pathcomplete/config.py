from __future__ import annotations


import json
import logging
import os
from pathlib import Path
from typing import Optional, Dict, Any, Mapping
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from pathcomplete.errors import ConfigError

log = logging.getLogger(__name__)

ENV_PREFIX = "COMPLETE_OPT_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


class CompletionOptions(BaseModel):
    """Matching and formatting options for a completion call.

    - path_sep: literal separator used to split, join and test paths
    - ci: case-insensitive matching
    - map_case: treat ``_`` and ``-`` as the same character
    - exp_im_path: allow short intermediate segments to match by prefix,
      so ``h/u/b`` can complete to ``home/ujang/bin``
    - exp_im_path_max_len: longest intermediate segment still expanded
    - result_prefix: string prepended to every result
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    path_sep: str = "/"
    ci: bool = False
    map_case: bool = False
    exp_im_path: bool = False
    exp_im_path_max_len: int = Field(default=2)
    result_prefix: str = ""

    @field_validator("path_sep")
    @classmethod
    def validate_path_sep(cls, v):
        if v == "":
            raise ValueError("path_sep must not be empty")
        return v

    @field_validator("exp_im_path_max_len")
    @classmethod
    def validate_max_len(cls, v):
        if v < 0:
            raise ValueError("exp_im_path_max_len must not be negative")
        return v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CompletionOptions":
        """Build options from ``COMPLETE_OPT_*`` environment variables.

        Unset variables keep the model default.
        """
        return build_options(env_overrides(environ))

    def merged(self, **overrides: Any) -> "CompletionOptions":
        """Return a copy with the non-None overrides applied and validated."""
        data = self.model_dump()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return build_options(data)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ConfigError(f"Environment variable {name} is not a boolean: {raw!r}")


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect option values from the environment."""
    if environ is None:
        environ = os.environ
    out: Dict[str, Any] = {}
    for field in ("ci", "map_case", "exp_im_path"):
        name = ENV_PREFIX + field.upper()
        if name in environ:
            out[field] = _parse_bool(name, environ[name])
    name = ENV_PREFIX + "EXP_IM_PATH_MAX_LEN"
    if name in environ:
        try:
            out["exp_im_path_max_len"] = int(environ[name])
        except ValueError:
            raise ConfigError(f"Environment variable {name} is not an integer: {environ[name]!r}")
    if out:
        log.debug("Options from environment: %s", out)
    return out


def build_options(data: Mapping[str, Any]) -> CompletionOptions:
    """Validate a mapping into CompletionOptions, raising ConfigError on bad input."""
    try:
        return CompletionOptions(**dict(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid completion options: {e}") from e
    except TypeError as e:
        raise ConfigError(f"Invalid completion options: {e}") from e


class ConfigManager:
    """Load and validate pathcomplete configuration files.
    """
    def __init__(self, config_path: Optional[str] = None):
        """Initialize the config manager.

        Args:
            config_path: Path to a JSON configuration file. If None, only
                        defaults and the environment are used.
        """
        self.config_path = Path(config_path) if config_path is not None else None
        self._options: Optional[CompletionOptions] = None

    def load_file(self) -> Dict[str, Any]:
        """Read the raw option mapping from the configuration file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            ConfigError: If the file is not valid JSON or not an object.
        """
        if self.config_path is None:
            return {}
        if not self.config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")

        with open(self.config_path, 'r', encoding='utf-8') as f:
            try:
                config_data = json.load(f)
            except json.JSONDecodeError as e:
                raise ConfigError(f"Invalid JSON in configuration file: {e}") from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Configuration file must contain a JSON object: {self.config_path}")
        return config_data

    def load_options(self, use_env: bool = True) -> CompletionOptions:
        """Load options, layering defaults < environment < file.

        Returns:
            CompletionOptions: The validated options.
        """
        data: Dict[str, Any] = {}
        if use_env:
            data.update(env_overrides())
        data.update(self.load_file())
        log.debug("Loading options from %s: %s", self.config_path, data)
        self._options = build_options(data)
        return self._options

    @property
    def options(self) -> CompletionOptions:
        if self._options is None:
            return self.load_options()
        return self._options
