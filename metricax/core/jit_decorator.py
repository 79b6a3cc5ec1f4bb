"""JIT optimization decorator for separating compilation concerns from geometry.

Kernels of the manifolds are plain functions of arrays. This module wraps them
with ``jax.jit`` on first use and caches the compiled function, so the
geometric code stays free of compilation details.
"""

import functools
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

import jax

from .jit_manager import JITManager


class JITOptimizer:
    """JIT optimizer with LRU caching for compiled functions.

    This class manages JIT compilation with configurable caching to avoid
    recompilation overhead while maintaining memory efficiency.
    """

    def __init__(self, cache_size: int = 128):
        """Initialize JIT optimizer with specified cache size.

        Args:
            cache_size: Maximum number of compiled functions to cache (default: 128)
        """
        self.cache_size = cache_size
        self._cache: OrderedDict[tuple[str, tuple[int, ...]], Callable[..., Any]] = OrderedDict()

    def compile(self, func: Callable[..., Any], static_args: tuple[int, ...] = ()) -> Callable[..., Any]:
        """Compile function with JIT and cache the result.

        Args:
            func: Function to compile
            static_args: Tuple of argument positions to treat as static

        Returns:
            JIT-compiled function
        """
        # Qualified names keep methods of different manifolds apart
        cache_key = (f"{func.__module__}.{func.__qualname__}", static_args)

        if cache_key in self._cache:
            self._cache.move_to_end(cache_key)
            return self._cache[cache_key]

        compiled_func: Callable[..., Any] = (
            jax.jit(func, static_argnums=static_args) if static_args else jax.jit(func)
        )
        self._cache[cache_key] = compiled_func

        if len(self._cache) > self.cache_size:
            self._cache.popitem(last=False)

        return compiled_func

    def clear_cache(self) -> None:
        """Clear the JIT compilation cache."""
        self._cache.clear()


# Global optimizer instance for decorator usage
_global_optimizer = JITOptimizer()


def jit_optimized(static_args: tuple[int, ...] = ()) -> Callable[..., Any]:
    """Decorator for JIT optimization with caching support.

    Compilation is looked up at call time, so ``JITManager.configure(enable_jit=False)``
    takes effect immediately and the undecorated function runs eagerly.

    Args:
        static_args: Tuple of argument positions to treat as static during compilation.
            Methods pass ``(0,)`` so that the (hashable) manifold is static.

    Returns:
        Decorator function that applies JIT optimization

    Examples:
        >>> @jit_optimized()
        ... def strictly_lower(x: Array) -> Array:
        ...     return jnp.tril(x, -1)

        >>> class Space:
        ...     @jit_optimized(static_args=(0,))
        ...     def proj(self, x: Array, v: Array) -> Array:
        ...         return jnp.tril(v)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            if not JITManager.get("enable_jit"):
                return func(*args, **kwargs)
            compiled_func = _global_optimizer.compile(func, static_args)
            return compiled_func(*args, **kwargs)

        wrapper._original_func = func  # type: ignore[attr-defined]
        wrapper._static_args = static_args  # type: ignore[attr-defined]
        return wrapper

    return decorator


def clear_jit_cache() -> None:
    """Clear the global JIT compilation cache.

    This is useful for testing or when memory usage needs to be reduced.
    """
    _global_optimizer.clear_cache()


def get_cache_info() -> dict[str, Any]:
    """Get information about the current JIT cache state.

    Returns:
        Dictionary with cache statistics including size and capacity
    """
    return {
        "cache_size": len(_global_optimizer._cache),
        "cache_capacity": _global_optimizer.cache_size,
        "cached_functions": list(_global_optimizer._cache.keys()),
    }
