"""Runtime configuration for MetricAX."""

import logging
from typing import Any, ClassVar

import jax

logger = logging.getLogger(__name__)

_DEFAULT_CONFIG: dict[str, Any] = {
    "enable_jit": True,
    "check_finite": True,
    "enable_x64": False,
    "debug_mode": False,
}


class JITManager:
    """Central configuration for JIT compilation and numerical safeguards.

    Configuration keys:
        enable_jit: Compile kernels with ``jax.jit`` (disable to step through them eagerly).
        check_finite: Raise instead of returning non-finite factors or results.
        enable_x64: Run JAX in double precision.
        debug_mode: Log every operator resolution on decorated manifolds.
    """

    _config: ClassVar[dict[str, Any]] = dict(_DEFAULT_CONFIG)

    @classmethod
    def configure(cls, **kwargs: Any) -> None:
        """Update the configuration.

        Args:
            **kwargs: Configuration parameters, see the class docstring.

        Raises:
            KeyError: If an unknown configuration key is given.
        """
        unknown = set(kwargs) - set(_DEFAULT_CONFIG)
        if unknown:
            raise KeyError(f"Unknown configuration keys: {sorted(unknown)}")

        if "enable_x64" in kwargs and kwargs["enable_x64"] != cls._config["enable_x64"]:
            jax.config.update("jax_enable_x64", bool(kwargs["enable_x64"]))

        cls._config.update(kwargs)
        logger.info(f"MetricAX configuration updated: {kwargs}")

    @classmethod
    def get(cls, key: str) -> Any:
        """Return a single configuration value."""
        return cls._config[key]

    @classmethod
    def get_config(cls) -> dict[str, Any]:
        """Get current configuration.

        Returns:
            Copy of the current configuration dictionary
        """
        return cls._config.copy()

    @classmethod
    def reset_config(cls) -> None:
        """Reset configuration to default.

        Precision (``enable_x64``) keeps its current value.
        """
        enable_x64 = cls._config["enable_x64"]
        cls._config = dict(_DEFAULT_CONFIG)
        cls._config["enable_x64"] = enable_x64
