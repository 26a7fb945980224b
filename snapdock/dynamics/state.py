"""Rigid body state and quaternion utilities for vessel repositioning.

The rigid body state contains:
- Position (3): [x, y, z] in the world frame
- Velocity (3): [vx, vy, vz] in the world frame
- Quaternion (4): [q0, q1, q2, q3] attitude (scalar-first convention)
- Angular velocity (3): [p, q, r] body rates

Quaternion convention:
- Scalar-first: q = [q0, q1, q2, q3] where q0 is the scalar part
- Represents rotation from body to world frame, so that
  ``rotate_vector(q, v_body)`` gives the vector in world coordinates
- Composition is world-frame pre-multiplication: applying ``qa`` after ``qb``
  is ``quaternion_multiply(qa, qb)``
"""

from dataclasses import dataclass

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

# =============================================================================
# Quaternion Utilities
# =============================================================================

IDENTITY_QUATERNION = np.array([1.0, 0.0, 0.0, 0.0])

# Cross product norm below which opposite unit vectors give no usable axis
_DEGENERATE_AXIS_NORM = 1e-12


@beartype
def normalize_quaternion(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a quaternion to unit length."""
    norm = np.linalg.norm(q)
    if norm < 1e-10:
        return IDENTITY_QUATERNION.copy()
    return q / norm


@beartype
def normalize_vector(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Normalize a 3-vector; the zero vector is returned unchanged."""
    norm = np.linalg.norm(v)
    if norm < 1e-12:
        return v.copy()
    return v / norm


@beartype
def quaternion_multiply(q1: NDArray[np.float64], q2: NDArray[np.float64]) -> NDArray[np.float64]:
    """Multiply two quaternions (Hamilton product).

    Args:
        q1: First quaternion [q0, q1, q2, q3]
        q2: Second quaternion [q0, q1, q2, q3]

    Returns:
        Product quaternion q1 * q2 (q2 applied first, then q1)
    """
    w1, x1, y1, z1 = q1
    w2, x2, y2, z2 = q2

    return np.array([
        w1*w2 - x1*x2 - y1*y2 - z1*z2,
        w1*x2 + x1*w2 + y1*z2 - z1*y2,
        w1*y2 - x1*z2 + y1*w2 + z1*x2,
        w1*z2 + x1*y2 - y1*x2 + z1*w2,
    ])


@beartype
def quaternion_conjugate(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Compute quaternion conjugate (inverse for unit quaternions)."""
    return np.array([q[0], -q[1], -q[2], -q[3]])


@beartype
def quaternion_to_dcm(q: NDArray[np.float64]) -> NDArray[np.float64]:
    """Convert quaternion to Direction Cosine Matrix (DCM).

    Args:
        q: Quaternion [q0, q1, q2, q3] representing rotation from frame A to B

    Returns:
        3x3 DCM that transforms vectors from frame A to frame B
    """
    q = normalize_quaternion(q)
    q0, q1, q2, q3 = q

    return np.array([
        [1 - 2*(q2**2 + q3**2), 2*(q1*q2 - q0*q3), 2*(q1*q3 + q0*q2)],
        [2*(q1*q2 + q0*q3), 1 - 2*(q1**2 + q3**2), 2*(q2*q3 - q0*q1)],
        [2*(q1*q3 - q0*q2), 2*(q2*q3 + q0*q1), 1 - 2*(q1**2 + q2**2)],
    ])


@beartype
def rotate_vector(q: NDArray[np.float64], v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Rotate a 3-vector by a quaternion."""
    return quaternion_to_dcm(q) @ v


@beartype
def axis_angle_quaternion(axis: NDArray[np.float64], angle: float) -> NDArray[np.float64]:
    """Quaternion for a right-handed rotation of ``angle`` [rad] about ``axis``."""
    axis = normalize_vector(axis)
    half = 0.5 * angle
    return normalize_quaternion(np.concatenate([[np.cos(half)], np.sin(half) * axis]))


@beartype
def orthogonal_axis(v: NDArray[np.float64]) -> NDArray[np.float64]:
    """Pick a unit vector orthogonal to ``v``, deterministically.

    Crosses with the world basis vector least aligned with ``v``.
    """
    basis = np.eye(3)[int(np.argmin(np.abs(v)))]
    return normalize_vector(np.cross(v, basis))


@beartype
def from_to_rotation(
    from_dir: NDArray[np.float64],
    to_dir: NDArray[np.float64],
    fallback_axis: NDArray[np.float64] | None = None,
) -> NDArray[np.float64]:
    """Shortest-arc rotation taking ``from_dir`` onto ``to_dir``.

    Args:
        from_dir: Start direction (need not be normalized)
        to_dir: End direction (need not be normalized)
        fallback_axis: Axis used when the directions are opposite and the
            rotation axis is ambiguous. Its component along ``from_dir`` is
            removed first; if nothing is left an arbitrary orthogonal axis
            is used.

    Returns:
        Unit quaternion [q0, q1, q2, q3]
    """
    a = normalize_vector(from_dir)
    b = normalize_vector(to_dir)
    d = float(np.dot(a, b))
    cross = np.cross(a, b)

    if d < 0.0 and np.linalg.norm(cross) < _DEGENERATE_AXIS_NORM:
        axis = None
        if fallback_axis is not None:
            projected = fallback_axis - np.dot(fallback_axis, a) * a
            if np.linalg.norm(projected) > 1e-6:
                axis = normalize_vector(projected)
        if axis is None:
            axis = orthogonal_axis(a)
        # 180 degrees: scalar part is zero
        return np.concatenate([[0.0], axis])

    # q = [1 + a.b, a x b], normalized, is the half-way quaternion.
    # 1 + a.b == |a + b|^2 / 2 for unit vectors, without cancellation near -1
    w = 0.5 * float(np.dot(a + b, a + b))
    q = np.concatenate([[w], cross])
    norm = np.linalg.norm(q)
    if norm == 0.0:
        # Both directions zero
        return IDENTITY_QUATERNION.copy()
    return q / norm


@beartype
def signed_angle(
    from_dir: NDArray[np.float64],
    to_dir: NDArray[np.float64],
    axis: NDArray[np.float64],
) -> float:
    """Signed angle [rad] from ``from_dir`` to ``to_dir`` about ``axis``.

    Both directions are projected onto the plane normal to ``axis``, so the
    result is the rotation about ``axis`` that best carries one onto the
    other. Positive is right-handed about ``axis``. Range (-pi, pi].
    """
    n = normalize_vector(axis)
    a = from_dir - np.dot(from_dir, n) * n
    b = to_dir - np.dot(to_dir, n) * n

    sin_term = float(np.dot(n, np.cross(a, b)))
    cos_term = float(np.dot(a, b))
    return float(np.arctan2(sin_term, cos_term))


# =============================================================================
# State Classes
# =============================================================================


@beartype
@dataclass
class RigidBodyState:
    """Rigid body state of a vessel's root part.

    Attributes:
        position: [x, y, z] position in world frame [m]
        velocity: [vx, vy, vz] velocity in world frame [m/s]
        quaternion: [q0, q1, q2, q3] body-to-world attitude (scalar-first)
        angular_velocity: [p, q, r] angular rates [rad/s]
    """
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    quaternion: NDArray[np.float64]
    angular_velocity: NDArray[np.float64]

    def __post_init__(self) -> None:
        """Validate and normalize state."""
        self.position = np.asarray(self.position, dtype=np.float64)
        self.velocity = np.asarray(self.velocity, dtype=np.float64)
        self.quaternion = normalize_quaternion(np.asarray(self.quaternion, dtype=np.float64))
        self.angular_velocity = np.asarray(self.angular_velocity, dtype=np.float64)

        if self.position.shape != (3,):
            raise ValueError(f"Position must be shape (3,), got {self.position.shape}")
        if self.velocity.shape != (3,):
            raise ValueError(f"Velocity must be shape (3,), got {self.velocity.shape}")
        if self.quaternion.shape != (4,):
            raise ValueError(f"Quaternion must be shape (4,), got {self.quaternion.shape}")
        if self.angular_velocity.shape != (3,):
            raise ValueError(f"Angular velocity must be shape (3,), got {self.angular_velocity.shape}")

    @classmethod
    def at_rest(
        cls,
        x: float = 0.0,
        y: float = 0.0,
        z: float = 0.0,
        quaternion: NDArray[np.float64] | None = None,
    ) -> "RigidBodyState":
        """Create a non-rotating state with zero velocity.

        Args:
            x, y, z: Position in world frame [m]
            quaternion: Attitude (defaults to identity)
        """
        if quaternion is None:
            quaternion = IDENTITY_QUATERNION.copy()

        return cls(
            position=np.array([x, y, z], dtype=np.float64),
            velocity=np.zeros(3),
            quaternion=quaternion,
            angular_velocity=np.zeros(3),
        )

    def copy(self) -> "RigidBodyState":
        """Create a copy of this state."""
        return RigidBodyState(
            position=self.position.copy(),
            velocity=self.velocity.copy(),
            quaternion=self.quaternion.copy(),
            angular_velocity=self.angular_velocity.copy(),
        )

    @property
    def dcm_body_to_world(self) -> NDArray[np.float64]:
        """Get DCM that transforms vectors from body to world frame."""
        return quaternion_to_dcm(self.quaternion)

    @property
    def dcm_world_to_body(self) -> NDArray[np.float64]:
        """Get DCM that transforms vectors from world to body frame."""
        return quaternion_to_dcm(quaternion_conjugate(self.quaternion))

    @property
    def speed(self) -> float:
        """Get speed magnitude [m/s]."""
        return float(np.linalg.norm(self.velocity))

    def to_body(self, point: NDArray[np.float64]) -> NDArray[np.float64]:
        """Express a world-frame point in body coordinates."""
        return self.dcm_world_to_body @ (point - self.position)
