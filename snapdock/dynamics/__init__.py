"""Rigid body state and rotation math for vessel repositioning.

Example:
    >>> import numpy as np
    >>> from snapdock.dynamics import from_to_rotation, rotate_vector
    >>>
    >>> q = from_to_rotation(np.array([1.0, 0.0, 0.0]), np.array([0.0, 1.0, 0.0]))
    >>> rotate_vector(q, np.array([1.0, 0.0, 0.0]))  # ~[0, 1, 0]
"""

from snapdock.dynamics.state import (
    IDENTITY_QUATERNION,
    RigidBodyState,
    axis_angle_quaternion,
    from_to_rotation,
    normalize_quaternion,
    normalize_vector,
    orthogonal_axis,
    quaternion_conjugate,
    quaternion_multiply,
    quaternion_to_dcm,
    rotate_vector,
    signed_angle,
)

__all__ = [
    # State
    "RigidBodyState",
    # Quaternion utilities
    "IDENTITY_QUATERNION",
    "quaternion_to_dcm",
    "quaternion_multiply",
    "quaternion_conjugate",
    "normalize_quaternion",
    "rotate_vector",
    "axis_angle_quaternion",
    "from_to_rotation",
    # Vector utilities
    "normalize_vector",
    "orthogonal_axis",
    "signed_angle",
]
