"""Configuration loading for the OpenTracing shim.

Settings are read from, in increasing priority:

1. A TOML file: ``./opentracing_shim.toml`` or ``~/.opentracing_shim.toml``,
   or an explicit path.
2. Environment variables prefixed with ``OPENTRACING_SHIM_``, one per
   setting, with ``__`` between section and key, e.g.
   ``OPENTRACING_SHIM_ATTRIBUTES__MAX_LENGTH=512``. Propagators are given as
   a comma separated list.
3. Explicit overrides passed by the caller.

Example file::

    [tracer]
    instrumentation_name = "legacy-service"

    [propagation]
    propagators = ["tracecontext", "baggage"]

    [attributes]
    max_length = 512

    [logging]
    warn_unsupported_format = false
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Annotated, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict, SettingsError

from opentracing_shim.errors import ConfigError

CONFIG_FILE_NAME = "opentracing_shim.toml"
ENV_PREFIX = "OPENTRACING_SHIM_"
ENV_NESTED_DELIMITER = "__"

SUPPORTED_PROPAGATORS = ("tracecontext", "baggage")


class TracerConfig(BaseModel):
    instrumentation_name: str = "opentracing_shim"
    instrumentation_version: Optional[str] = None


class PropagationConfig(BaseModel):
    # Empty list: use the globally configured OpenTelemetry propagator.
    propagators: Annotated[List[str], NoDecode] = Field(default_factory=list)

    @field_validator("propagators", mode="before")
    @classmethod
    def _split_names(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("propagators")
    @classmethod
    def _known_propagators(cls, value: List[str]) -> List[str]:
        names = [name.strip().lower() for name in value if name.strip()]
        unknown = [name for name in names if name not in SUPPORTED_PROPAGATORS]
        if unknown:
            raise ValueError(
                f"unknown propagators {unknown}, expected any of {list(SUPPORTED_PROPAGATORS)}"
            )
        return names


class AttributesConfig(BaseModel):
    max_length: Optional[int] = Field(default=1000, gt=0)


class LoggingConfig(BaseModel):
    warn_unsupported_format: bool = True


class ShimConfig(BaseSettings):
    """
    Complete shim configuration.

    Instantiating it reads ``OPENTRACING_SHIM_*`` environment variables for
    any setting not passed explicitly. ``load_config`` adds the TOML file
    underneath.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter=ENV_NESTED_DELIMITER,
        case_sensitive=False,
        extra="ignore",
    )

    tracer: TracerConfig = Field(default_factory=TracerConfig)
    propagation: PropagationConfig = Field(default_factory=PropagationConfig)
    attributes: AttributesConfig = Field(default_factory=AttributesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _problems(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}"
        for item in error.errors()
    ]


def find_config_file() -> Optional[str]:
    """
    Find a config file in the current directory, then the home directory.

    Returns:
        Path to the config file, or None if there is none
    """
    candidates = [
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / f".{CONFIG_FILE_NAME}",
    ]
    for candidate in candidates:
        if candidate.is_file():
            return str(candidate)
    return None


def load_toml_config(path: str) -> Dict[str, Any]:
    """
    Load a TOML config file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError: if the file is not valid TOML
    """
    file_path = Path(path)
    if not file_path.is_file():
        return {}
    try:
        with file_path.open("rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError("Invalid TOML config file", str(path), [str(e)]) from e


def load_config_from_env(flat: bool = False) -> Dict[str, Any]:
    """
    Read and validate the ``OPENTRACING_SHIM_*`` environment variables.

    Args:
        flat: return ``{key: value}`` instead of ``{section: {key: value}}``

    Missing variables are left out of the result.

    Raises:
        ConfigError: if a variable holds a value of the wrong type
    """
    try:
        from_env = ShimConfig().model_dump(exclude_unset=True)
    except ValidationError as e:
        raise ConfigError("Invalid environment configuration", "environment", _problems(e)) from e
    except SettingsError as e:
        raise ConfigError("Invalid environment configuration", "environment", [str(e)]) from e

    if not flat:
        return from_env
    return {key: value for section in from_env.values() for key, value in section.items()}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> ShimConfig:
    """
    Load the shim configuration.

    Priority: explicit overrides > environment variables > config file.

    Raises:
        ConfigError: if the file cannot be parsed or a value is invalid
    """
    path = config_file or find_config_file()
    data: Dict[str, Any] = load_toml_config(path) if path else {}
    data = _merge(data, load_config_from_env())
    if overrides:
        data = _merge(data, overrides)
    try:
        # Environment values are already merged into data.
        return ShimConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("Invalid configuration", problems=_problems(e)) from e


def validate_config(
    config_file: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> Tuple[bool, str, Optional[ShimConfig]]:
    """
    Load and validate the configuration without raising.

    Returns:
        ``(is_valid, message, config)``; config is None when invalid
    """
    try:
        config = load_config(config_file=config_file, overrides=overrides)
    except ConfigError as e:
        return False, str(e), None
    return True, "Configuration is valid", config
