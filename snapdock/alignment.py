"""Alignment solver: where to put the active vessel so its port meets the target.

Given the world poses of the two docking nodes and the active vessel's root
rigid body, computes the root attitude, position and velocity that leave the
source port facing the target port, rolled to match it, a short standoff
away, and drifting slowly toward it.

Rotation is built in two world-frame steps:
    1. q1: shortest arc taking the source port's forward onto -target forward
    2. q_roll: rotation about the docking axis that lines the source port's
       up axis up with the target port's up axis
    final = q_roll * q1 * q_root

Position is closed form: the node's offset from the root is fixed in the
root's body frame, so once the final attitude is known the root goes at
``desired_node_position - R(final) @ offset_body``.

Example:
    >>> from snapdock.alignment import solve_alignment
    >>>
    >>> plan = solve_alignment(
    ...     source=src_port.node_transform,
    ...     target=dst_port.node_transform,
    ...     moving_state=vessel.root_rigid_body,
    ...     target_velocity=target_vessel.root_rigid_body.velocity,
    ... )
    >>> print(plan.summary())
"""

from dataclasses import dataclass, field

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from snapdock.config import ALIGN_SEPARATION_M, CLOSING_SPEED_MPS, SnapConfig
from snapdock.dynamics.state import (
    RigidBodyState,
    axis_angle_quaternion,
    from_to_rotation,
    normalize_vector,
    quaternion_multiply,
    rotate_vector,
    signed_angle,
)
from snapdock.validation import SnapCandidate
from snapdock.vessel import NodeTransform

# =============================================================================
# Plan
# =============================================================================


@beartype
@dataclass
class AlignmentPlan:
    """Target rigid body state for the moving vessel's root.

    Attributes:
        rotation: Root attitude quaternion (body to world, scalar-first)
        position: Root position in world frame [m]
        velocity: Root velocity in world frame [m/s]
        velocity_change: velocity minus the root's current velocity [m/s]
        angular_velocity: Always zero; rotation is stopped, not matched
        roll_angle: Roll correction applied about the docking axis [rad]
    """
    rotation: NDArray[np.float64]
    position: NDArray[np.float64]
    velocity: NDArray[np.float64]
    velocity_change: NDArray[np.float64]
    roll_angle: float = 0.0
    angular_velocity: NDArray[np.float64] = field(default_factory=lambda: np.zeros(3))

    def summary(self) -> str:
        """Generate a one-screen summary of the plan."""
        p, v, dv = self.position, self.velocity, self.velocity_change
        lines = [
            "Alignment plan",
            "=" * 50,
            f"Rotation (q0..q3):  [{', '.join(f'{c:+.4f}' for c in self.rotation)}]",
            f"Position [m]:       [{p[0]:.2f}, {p[1]:.2f}, {p[2]:.2f}]",
            f"Velocity [m/s]:     [{v[0]:.3f}, {v[1]:.3f}, {v[2]:.3f}]",
            f"Delta-v [m/s]:      {np.linalg.norm(dv):.3f}",
            f"Roll correction:    {np.degrees(self.roll_angle):+.1f} deg",
        ]
        return "\n".join(lines)


# =============================================================================
# Solver
# =============================================================================


@beartype
def alignment_rotation(
    source: NodeTransform,
    target: NodeTransform,
) -> tuple[NDArray[np.float64], float]:
    """World-frame rotation that makes the source node face the target node.

    Args:
        source: Source node pose
        target: Target node pose

    Returns:
        (delta rotation quaternion, roll angle [rad]). Pre-multiply the body
        attitude by the quaternion.
    """
    docking_axis = -target.forward

    # Already anti-parallel gives identity; parallel flips about the port's up
    q1 = from_to_rotation(source.forward, docking_axis, fallback_axis=source.up)

    up_after = rotate_vector(q1, source.up)
    roll = signed_angle(up_after, target.up, docking_axis)
    q_roll = axis_angle_quaternion(docking_axis, roll)

    return quaternion_multiply(q_roll, q1), roll


@beartype
def solve_alignment(
    source: NodeTransform,
    target: NodeTransform,
    moving_state: RigidBodyState,
    target_velocity: NDArray[np.float64],
    separation: float = ALIGN_SEPARATION_M,
    closing_speed: float = CLOSING_SPEED_MPS,
) -> AlignmentPlan:
    """Compute the snap for the moving vessel.

    Args:
        source: World pose of the moving vessel's docking node
        target: World pose of the target docking node
        moving_state: Root rigid body of the moving vessel
        target_velocity: Velocity of the target vessel's root [m/s]
        separation: Standoff along the target's forward axis [m]
        closing_speed: Speed toward the target after the snap [m/s]

    Returns:
        AlignmentPlan for the moving vessel's root
    """
    delta_rotation, roll = alignment_rotation(source, target)
    rotation = quaternion_multiply(delta_rotation, moving_state.quaternion)

    # Node offset from the root, fixed in the body frame
    offset_body = moving_state.to_body(source.position)

    target_forward = normalize_vector(target.forward)
    desired_node_position = target.position + target_forward * separation
    position = desired_node_position - rotate_vector(rotation, offset_body)

    # Match the target, then drift toward it along the docking axis
    velocity = target_velocity - target_forward * closing_speed

    return AlignmentPlan(
        rotation=rotation,
        position=position,
        velocity=velocity,
        velocity_change=velocity - moving_state.velocity,
        roll_angle=roll,
    )


@beartype
def solve(candidate: SnapCandidate, config: SnapConfig | None = None) -> AlignmentPlan:
    """Solve for a validated candidate.

    Raises:
        ValueError: If a node transform or a root rigid body is missing.
            Validation covers the source side; the target vessel's root is
            only needed here, for its velocity.
    """
    config = config or SnapConfig()

    source = candidate.source_port.node_transform
    target = candidate.target_port.node_transform
    moving_state = candidate.source_vessel.root_rigid_body
    if source is None or target is None:
        raise ValueError("Docking node transform disappeared after validation")
    if moving_state is None:
        raise ValueError(f"{candidate.source_vessel.name} has no root rigid body")

    target_root = candidate.target_vessel.root_rigid_body
    if target_root is None:
        raise ValueError(f"{candidate.target_vessel.name} has no root rigid body")

    return solve_alignment(
        source=source,
        target=target,
        moving_state=moving_state,
        target_velocity=target_root.velocity,
        separation=config.align_separation,
        closing_speed=config.closing_speed,
    )
