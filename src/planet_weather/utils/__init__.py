"""
Shared helpers for the weather simulation.
"""

from .random_source import (
    RandomSource,
    NumpyRandomSource,
    SequenceRandomSource,
    uniform,
    random_int
)
from .sphere_utils import (
    normalize,
    rotate_about_axis,
    direction_from_angles,
    random_unit_vector,
    perpendicular_basis,
    lerp,
    distance_3d,
    get_bbox
)

__all__ = [
    'RandomSource',
    'NumpyRandomSource',
    'SequenceRandomSource',
    'uniform',
    'random_int',
    'normalize',
    'rotate_about_axis',
    'direction_from_angles',
    'random_unit_vector',
    'perpendicular_basis',
    'lerp',
    'distance_3d',
    'get_bbox'
]
