# rasterflow/utils/jax_utils.py
from __future__ import annotations
from typing import Any, Callable, Optional, Sequence

try:
    import jax
    from jax import jit as _jit
    JAX_AVAILABLE = True
except Exception:
    JAX_AVAILABLE = False
    jax = None  # type: ignore

import numpy as np


def get_jax_version() -> Optional[str]:
    """Return the JAX version string if available, else None."""
    return getattr(jax, "__version__", None) if JAX_AVAILABLE else None


def require_jax() -> None:
    """Raise ImportError when the JAX backend is requested but not installed."""
    if not JAX_AVAILABLE:
        raise ImportError(
            "JAX backend requested but jax is not installed; "
            "install with `pip install rasterflow[jax]`"
        )


def enable_x64() -> None:
    """
    Switch JAX to 64-bit arithmetic.

    Flowline stepping runs in double precision; JAX defaults to
    float32 and silently downcasts unless this flag is on.
    """
    require_jax()
    jax.config.update("jax_enable_x64", True)


def to_numpy(x: Any, dtype: Any = None) -> np.ndarray:
    """Convert JAX/NumPy arrays to NumPy."""
    return np.asarray(x, dtype=dtype)


def maybe_jit(fn: Callable, enable: bool = True, static_argnums: Optional[Sequence[int]] = None):
    """
    JIT-wrap `fn` with JAX when available and enabled; otherwise return `fn` unchanged.
    """
    if JAX_AVAILABLE and enable:
        return _jit(fn, static_argnums=static_argnums)
    return fn


def array_module(backend: str):
    """Return the array namespace (numpy or jax.numpy) for a sampler backend."""
    if backend == "jax":
        require_jax()
        import jax.numpy as jnp
        return jnp
    return np
