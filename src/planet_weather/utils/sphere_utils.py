"""
Vector and spherical-shell utilities for positions above a planet surface.
"""

import numpy as np
from typing import Tuple
from scipy.spatial.transform import Rotation

from .random_source import RandomSource


VERTICAL_AXIS = np.array([0.0, 1.0, 0.0])


def normalize(vector: np.ndarray) -> np.ndarray:
    """
    Return the unit vector in the direction of vector.

    Args:
        vector: Any 3D vector

    Returns:
        Unit vector, or the +Y axis for a zero-length input
    """
    length = np.linalg.norm(vector)
    if length < 1e-12:
        return VERTICAL_AXIS.copy()
    return np.asarray(vector, dtype=np.float64) / length


def rotate_about_axis(vector: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotate vector around axis by angle (right-hand rule).

    Args:
        vector: Vector to rotate
        axis: Rotation axis (normalized internally)
        angle: Rotation angle in radians

    Returns:
        Rotated vector
    """
    rotation = Rotation.from_rotvec(normalize(axis) * angle)
    return rotation.apply(vector)


def direction_from_angles(theta: float, phi: float) -> np.ndarray:
    """
    Unit direction from azimuth theta and polar angle phi (Y is the pole).

    Args:
        theta: Azimuth in radians [0, 2π)
        phi: Polar angle from +Y in radians [0, π]

    Returns:
        Unit vector [x, y, z]
    """
    return np.array([
        np.sin(phi) * np.cos(theta),
        np.cos(phi),
        np.sin(phi) * np.sin(theta)
    ])


def random_unit_vector(rng: RandomSource) -> np.ndarray:
    """Uniformly distributed direction on the unit sphere"""
    theta = rng.next_float() * 2 * np.pi
    phi = np.arccos(2 * rng.next_float() - 1)
    return direction_from_angles(theta, phi)


def perpendicular_basis(normal: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Two unit vectors perpendicular to normal and to each other.

    Args:
        normal: Unit surface normal

    Returns:
        Tuple of (tangent_a, tangent_b)
    """
    reference = np.array([1.0, 0.0, 0.0])
    # Fall back to Z when the normal is (anti)parallel to X
    if abs(np.dot(normal, reference)) > 0.999:
        reference = np.array([0.0, 0.0, 1.0])
    tangent_a = normalize(np.cross(normal, reference))
    tangent_b = normalize(np.cross(normal, tangent_a))
    return tangent_a, tangent_b


def lerp(start: np.ndarray, end: np.ndarray, t: float) -> np.ndarray:
    """Linear interpolation between two points"""
    return start + (end - start) * t


def distance_3d(pos1: np.ndarray, pos2: np.ndarray) -> float:
    """
    Calculate 3D Euclidean distance.

    Args:
        pos1: First position [x, y, z]
        pos2: Second position [x, y, z]

    Returns:
        Distance in world units
    """
    return float(np.linalg.norm(np.asarray(pos2) - np.asarray(pos1)))


def get_bbox(position: np.ndarray, radius: float) -> Tuple[float, ...]:
    """
    Get axis-aligned bounding box around a position.

    Args:
        position: Center position
        radius: Half-width of the box

    Returns:
        Bounding box tuple (min_x, min_y, min_z, max_x, max_y, max_z)
    """
    return (
        position[0] - radius, position[1] - radius, position[2] - radius,
        position[0] + radius, position[1] + radius, position[2] + radius
    )
