"""
Utilities for rasterflow.

Contains:
- jax_utils: JAX availability guard, x64 switch, jit helper
- logging: timers, memory monitoring, progress tracking
- config: package-wide settings
"""

from .jax_utils import (
    JAX_AVAILABLE,
    get_jax_version,
    require_jax,
    enable_x64,
    to_numpy,
    maybe_jit,
    array_module,
)

from .logging import (
    Timer,
    memory_info,
    create_progress_callback,
    ProgressCallback,
)

from .config import (
    PackageConfig,
    configure,
    get_config,
    reset_config,
    get_system_info,
)

__all__ = [
    # jax_utils
    "JAX_AVAILABLE",
    "get_jax_version",
    "require_jax",
    "enable_x64",
    "to_numpy",
    "maybe_jit",
    "array_module",
    # logging
    "Timer",
    "memory_info",
    "create_progress_callback",
    "ProgressCallback",
    # config
    "PackageConfig",
    "configure",
    "get_config",
    "reset_config",
    "get_system_info",
]
