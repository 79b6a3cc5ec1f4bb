"""MetricAX core module for JIT compilation, configuration and shared types."""

from .constants import NumericalConstants, SolverDefaults
from .jit_decorator import clear_jit_cache, get_cache_info, jit_optimized
from .jit_manager import JITManager

__all__ = [
    "JITManager",
    "NumericalConstants",
    "SolverDefaults",
    "clear_jit_cache",
    "get_cache_info",
    "jit_optimized",
]
