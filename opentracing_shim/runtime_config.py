"""Runtime configuration state management."""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from opentracing_shim.config import ShimConfig

# Global runtime configuration state
_config = {
    "attr_truncation_limit": 1000,
    "warn_unsupported_format": True,
}


def set_attr_truncation_limit(value: Optional[int]) -> None:
    _config["attr_truncation_limit"] = value


def get_attr_truncation_limit() -> Optional[int]:
    return _config["attr_truncation_limit"]


def set_warn_unsupported_format(value: bool) -> None:
    _config["warn_unsupported_format"] = value


def get_warn_unsupported_format() -> bool:
    return _config["warn_unsupported_format"]


def apply_config(config: "ShimConfig") -> None:
    """Copy the process-wide settings of a loaded config into runtime state."""
    set_attr_truncation_limit(config.attributes.max_length)
    set_warn_unsupported_format(config.logging.warn_unsupported_format)


def reset() -> None:
    """Restore the defaults."""
    set_attr_truncation_limit(1000)
    set_warn_unsupported_format(True)
