"""JIT manager unit tests."""

import logging

import jax
import pytest

from metricax.core.jit_manager import JITManager


class TestJITManager:
    """Unit tests for the configuration system."""

    def setup_method(self):
        """Setup before each test execution."""
        JITManager.reset_config()

    def test_default_configuration(self):
        """Defaults enable compilation and finiteness checks."""
        config = JITManager.get_config()

        assert config["enable_jit"] is True
        assert config["check_finite"] is True
        assert config["debug_mode"] is False

    def test_configure_basic_settings(self):
        """Test basic configuration updates."""
        JITManager.configure(enable_jit=False, debug_mode=True)

        assert JITManager.get("enable_jit") is False
        assert JITManager.get("debug_mode") is True

    def test_configure_rejects_unknown_keys(self):
        """Unknown keys raise instead of being stored silently."""
        with pytest.raises(KeyError, match="cache_size"):
            JITManager.configure(cache_size=1000)

        assert "cache_size" not in JITManager.get_config()

    def test_get_config_returns_copy(self):
        """Mutating the returned dictionary does not change the configuration."""
        config = JITManager.get_config()
        config["enable_jit"] = False

        assert JITManager.get("enable_jit") is True

    def test_reset_config_keeps_precision(self):
        """Reset restores the defaults but keeps the x64 setting."""
        JITManager.configure(enable_jit=False, check_finite=False)
        JITManager.reset_config()

        assert JITManager.get("enable_jit") is True
        assert JITManager.get("check_finite") is True
        assert JITManager.get("enable_x64") is True
        assert jax.config.jax_enable_x64

    def test_configure_logs_changes(self, caplog):
        """Configuration changes are logged at INFO level."""
        with caplog.at_level(logging.INFO, logger="metricax.core.jit_manager"):
            JITManager.configure(check_finite=False)

        assert "check_finite" in caplog.text
