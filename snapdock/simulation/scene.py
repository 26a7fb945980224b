"""In-memory flight scene hosting the vessels a snap operates on.

The scene plays the part of the host simulation: it answers the two selection
queries (active vessel, current target), owns the on-rails switch, moves
vessels rigidly when their root is repositioned, and collects on-screen
messages.

Example:
    >>> from snapdock.simulation import FlightScene
    >>> from snapdock.vessel import NodeTransform
    >>>
    >>> scene = FlightScene.rendezvous(
    ...     chaser_node=NodeTransform.from_axes([0, 0, 0], [1, 0, 0], [0, 1, 0]),
    ...     target_node=NodeTransform.from_axes([10, 0, 0], [-1, 0, 0], [0, 1, 0]),
    ... )
    >>> scene.active_vessel.name
    'Chaser'
"""

import logging
import uuid
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from snapdock.alignment import AlignmentPlan
from snapdock.dynamics.state import (
    RigidBodyState,
    axis_angle_quaternion,
    normalize_quaternion,
    quaternion_conjugate,
    quaternion_multiply,
)
from snapdock.errors import HostStateError
from snapdock.vessel import ActionGroup, NodeTransform, Vessel

logger = logging.getLogger(__name__)

# =============================================================================
# Messages
# =============================================================================


class GameScene(Enum):
    """Host scenes; snapping is only possible in flight."""

    FLIGHT = auto()
    SPACE_CENTER = auto()
    EDITOR = auto()
    TRACKING_STATION = auto()


@dataclass(frozen=True)
class ScreenMessage:
    """A transient on-screen notice."""
    text: str
    duration: float


@dataclass
class MessageBoard:
    """Collects posted screen messages, newest last."""
    messages: list[ScreenMessage] = field(default_factory=list)

    def post(self, text: str, duration: float) -> ScreenMessage:
        message = ScreenMessage(text=text, duration=duration)
        self.messages.append(message)
        return message

    @property
    def latest(self) -> ScreenMessage | None:
        return self.messages[-1] if self.messages else None

    def clear(self) -> None:
        self.messages.clear()


# =============================================================================
# Flight Scene
# =============================================================================


@dataclass(eq=False)
class FlightScene:
    """Host simulation state for one flight session.

    Attributes:
        vessels: Vessels in the scene
        active_vessel: Vessel under player control
        target: Currently targeted object (a DockingPort, a Vessel, ...)
        scene: Current host scene
        messages: On-screen message log
    """
    vessels: list[Vessel] = field(default_factory=list)
    active_vessel: Vessel | None = None
    target: object | None = None
    scene: GameScene = GameScene.FLIGHT
    messages: MessageBoard = field(default_factory=MessageBoard)
    _on_rails: set[uuid.UUID] = field(default_factory=set, repr=False)

    @classmethod
    def rendezvous(
        cls,
        chaser_node: NodeTransform,
        target_node: NodeTransform,
        chaser_state: RigidBodyState | None = None,
        target_state: RigidBodyState | None = None,
        chaser_type: str = "size1",
        target_type: str = "size1",
    ) -> "FlightScene":
        """Create a scene with a chaser controlled from its port and the
        target vessel's port set as target.

        Args:
            chaser_node: World pose of the chaser's docking node
            target_node: World pose of the target's docking node
            chaser_state: Chaser root rigid body (default: at rest at origin)
            target_state: Target root rigid body (default: at rest at origin)
            chaser_type: Chaser port type tag
            target_type: Target port type tag
        """
        chaser = Vessel.with_docking_port(
            "Chaser", node=chaser_node, root_state=chaser_state, node_type=chaser_type,
        )
        station = Vessel.with_docking_port(
            "Station", node=target_node, root_state=target_state, node_type=target_type,
            control_from_port=False,
        )
        return cls(
            vessels=[chaser, station],
            active_vessel=chaser,
            target=station.docking_ports[0],
        )

    @property
    def is_flight(self) -> bool:
        return self.scene is GameScene.FLIGHT

    def add_vessel(self, vessel: Vessel) -> Vessel:
        self.vessels.append(vessel)
        return vessel

    # -------------------------------------------------------------------------
    # On rails
    # -------------------------------------------------------------------------

    def is_on_rails(self, vessel: Vessel) -> bool:
        return vessel.id in self._on_rails

    @contextmanager
    def on_rails(self, vessel: Vessel) -> Iterator[Vessel]:
        """Suspend physics for ``vessel`` for the duration of the block.

        Physics resumes on every exit path, including exceptions.
        """
        if not vessel.loaded:
            raise HostStateError(f"{vessel.name} is not loaded")
        if self.is_on_rails(vessel):
            raise HostStateError(f"{vessel.name} is already on rails")

        self._on_rails.add(vessel.id)
        logger.debug("%s on rails", vessel.name)
        try:
            yield vessel
        finally:
            self._on_rails.discard(vessel.id)
            logger.debug("%s off rails", vessel.name)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def _root(self, vessel: Vessel) -> RigidBodyState:
        root = vessel.root_rigid_body
        if root is None:
            raise HostStateError(f"{vessel.name} has no root rigid body")
        return root

    def _require_rails(self, vessel: Vessel, action: str) -> None:
        if not self.is_on_rails(vessel):
            raise HostStateError(f"Cannot {action} {vessel.name} while it is in physics")

    def _move_attached(
        self,
        vessel: Vessel,
        rotation: NDArray[np.float64],
        pivot: NDArray[np.float64],
        new_pivot: NDArray[np.float64],
    ) -> None:
        for port in vessel.docking_ports:
            if port.node_transform is not None:
                port.node_transform = port.node_transform.moved(rotation, pivot, new_pivot)

    def set_rotation(self, vessel: Vessel, rotation: NDArray[np.float64]) -> None:
        """Rotate the vessel about its root to the given attitude."""
        self._require_rails(vessel, "rotate")
        root = self._root(vessel)

        rotation = normalize_quaternion(np.asarray(rotation, dtype=np.float64))
        delta = quaternion_multiply(rotation, quaternion_conjugate(root.quaternion))
        self._move_attached(vessel, delta, root.position, root.position)
        root.quaternion = rotation

    def set_position(self, vessel: Vessel, position: NDArray[np.float64]) -> None:
        """Translate the vessel so its root sits at ``position``."""
        self._require_rails(vessel, "move")
        root = self._root(vessel)

        position = np.asarray(position, dtype=np.float64)
        self._move_attached(vessel, np.array([1.0, 0.0, 0.0, 0.0]), root.position, position)
        root.position = position.copy()

    def change_velocity(self, vessel: Vessel, delta_v: NDArray[np.float64]) -> None:
        root = self._root(vessel)
        root.velocity = root.velocity + delta_v

    def set_angular_velocity(self, vessel: Vessel, omega: NDArray[np.float64]) -> None:
        root = self._root(vessel)
        root.angular_velocity = np.asarray(omega, dtype=np.float64).copy()

    def disable_action_groups(self, vessel: Vessel, groups: Iterable[ActionGroup]) -> None:
        for group in groups:
            vessel.set_action_group(group, False)

    @beartype
    def apply_plan(
        self,
        vessel: Vessel,
        plan: AlignmentPlan,
        disable: tuple[ActionGroup, ...] = (ActionGroup.SAS, ActionGroup.RCS),
    ) -> None:
        """Apply an alignment plan to a vessel.

        Attitude and position are set together on rails; velocity and the
        control-system switches follow once physics has resumed.

        Args:
            vessel: Vessel to move
            plan: Solver output for the vessel's root
            disable: Action groups to switch off so they do not fight the snap
        """
        self._root(vessel)

        with self.on_rails(vessel):
            self.set_rotation(vessel, plan.rotation)
            self.set_position(vessel, plan.position)

        self.set_angular_velocity(vessel, plan.angular_velocity)
        self.change_velocity(vessel, plan.velocity_change)
        self.disable_action_groups(vessel, disable)

        logger.info(
            "Applied alignment plan to %s (delta-v %.3f m/s)",
            vessel.name, float(np.linalg.norm(plan.velocity_change)),
        )

    # -------------------------------------------------------------------------
    # Propagation
    # -------------------------------------------------------------------------

    @beartype
    def step(self, dt: float) -> None:
        """Advance every loaded, off-rails vessel by ``dt`` seconds.

        Constant velocity and angular velocity over the step (no forces).
        Angular velocity is taken in the world frame.
        """
        for vessel in self.vessels:
            root = vessel.root_rigid_body
            if root is None or not vessel.loaded or self.is_on_rails(vessel):
                continue

            rate = float(np.linalg.norm(root.angular_velocity))
            if rate > 0.0:
                delta = axis_angle_quaternion(root.angular_velocity, rate * dt)
            else:
                delta = np.array([1.0, 0.0, 0.0, 0.0])

            new_position = root.position + root.velocity * dt
            self._move_attached(vessel, delta, root.position, new_position)
            root.quaternion = normalize_quaternion(quaternion_multiply(delta, root.quaternion))
            root.position = new_position
