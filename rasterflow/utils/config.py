# rasterflow/utils/config.py
"""
Global package configuration.

Provides centralized settings for the sampler backend, progress reporting and
verbosity used by fields and the batch tracer.
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Dict, Any
import warnings
import psutil

from .jax_utils import JAX_AVAILABLE, get_jax_version
from ..errors import InvalidConfiguration

_BACKENDS = ("numpy", "jax")


@dataclass
class PackageConfig:
    """
    Global configuration for rasterflow.

    Controls the default interpolation backend and the monitoring output of
    batch tracing.
    """
    # Default sampler backend for new velocity fields
    backend: str = "numpy"              # 'numpy' | 'jax'

    # Progress and monitoring
    show_progress: bool = False         # Print single-line progress in trace_seeds
    progress_update_every: int = 100    # Seeds between progress updates
    verbose: bool = False               # Print run summaries
    track_memory: bool = False          # Report RSS growth in verbose run summaries

    # Environment settings
    _system_memory_gb: float = field(init=False, default=0.0)

    def __post_init__(self):
        self._detect_system_resources()
        self._validate_config()

    def _detect_system_resources(self):
        """Detect available system memory."""
        self._system_memory_gb = psutil.virtual_memory().total / (1024**3)

    def _validate_config(self):
        """Validate configuration settings."""
        if self.backend not in _BACKENDS:
            raise InvalidConfiguration(f"backend must be one of {_BACKENDS}, got '{self.backend}'")
        if self.backend == "jax" and not JAX_AVAILABLE:
            warnings.warn("JAX backend requested but jax is not installed; using 'numpy'")
            self.backend = "numpy"
        if int(self.progress_update_every) <= 0:
            raise InvalidConfiguration(
                f"progress_update_every must be positive, got {self.progress_update_every}"
            )

    def get_system_info(self) -> Dict[str, Any]:
        """Get system resource information."""
        return {
            "system_memory_gb": self._system_memory_gb,
            "jax_available": JAX_AVAILABLE,
            "jax_version": get_jax_version(),
            "current_config": {
                "backend": self.backend,
                "show_progress": self.show_progress,
                "progress_update_every": self.progress_update_every,
                "verbose": self.verbose,
                "track_memory": self.track_memory,
            },
        }


# Global configuration instance
_global_config = PackageConfig()


def get_config() -> PackageConfig:
    """Get global package configuration."""
    return _global_config


def configure(**kwargs) -> None:
    """
    Configure package settings.

    Parameters
    ----------
    **kwargs : dict
        Configuration parameters to update
    """
    public = {f.name for f in fields(PackageConfig) if not f.name.startswith("_")}
    for key, value in kwargs.items():
        if key in public:
            setattr(_global_config, key, value)
        else:
            warnings.warn(f"Unknown configuration parameter: {key}")

    _global_config._validate_config()


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _global_config
    _global_config = PackageConfig()


def get_system_info() -> Dict[str, Any]:
    """System resources and current settings of the global configuration."""
    return _global_config.get_system_info()
