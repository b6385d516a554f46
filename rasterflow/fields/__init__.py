# rasterflow/fields/__init__.py
"""
Raster velocity fields.

- Region: grid geometry and coordinate conversion
- VelocityField: three component grids with no-data aware trilinear sampling
- Gradient fields: velocity from the gradient of a scalar raster
"""

from .base import (
    Field,
    Region,
    SampleResult,
    REGISTRATIONS,
)

from .structured import (
    VelocityField,
    create_velocity_field,
    create_uniform_field,
    create_field_from_function,
)

from .gradient import (
    scalar_gradient,
    create_gradient_field,
)

__all__ = [
    "Field",
    "Region",
    "SampleResult",
    "REGISTRATIONS",
    "VelocityField",
    "create_velocity_field",
    "create_uniform_field",
    "create_field_from_function",
    "scalar_gradient",
    "create_gradient_field",
]
