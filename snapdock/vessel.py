"""Vessel, part and docking port model.

Mirrors the host simulation objects the snap operation reads: vessels made of
parts, a root part carrying the physics rigid body, and docking ports with a
world-space node transform that moves rigidly with the vessel.

Example:
    >>> from snapdock.vessel import Vessel, NodeTransform
    >>>
    >>> ship = Vessel.with_docking_port(
    ...     "Chaser",
    ...     node=NodeTransform.from_axes(position=[0, 0, 2], forward=[0, 0, 1], up=[0, 1, 0]),
    ... )
    >>> ship.docking_ports[0].state
    <PortState.READY: 'Ready'>
"""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum, auto

import numpy as np
from beartype import beartype
from numpy.typing import NDArray

from snapdock.dynamics.state import (
    RigidBodyState,
    normalize_vector,
    rotate_vector,
)

# =============================================================================
# Enums
# =============================================================================


class PortState(Enum):
    """Occupancy state of a docking port, as reported by the host."""

    READY = "Ready"
    ACQUIRE = "Acquire"
    OCCUPIED = "Occupied"
    DOCKED = "Docked (docker)"
    PRE_ATTACHED = "PreAttached"
    DISABLED = "Disabled"

    def __str__(self) -> str:
        return self.value


class Situation(Enum):
    """Situational state of a vessel."""

    ORBITING = auto()
    SUB_ORBITAL = auto()
    ESCAPING = auto()
    FLYING = auto()
    DOCKED = auto()
    LANDED = auto()
    SPLASHED = auto()
    PRELAUNCH = auto()


# Resting on a surface or not launched yet
SURFACE_SITUATIONS = frozenset({Situation.LANDED, Situation.SPLASHED, Situation.PRELAUNCH})


class ActionGroup(Enum):
    """Named automatic-control systems a vessel can switch on and off."""

    SAS = "SAS"      # Attitude hold
    RCS = "RCS"      # Maneuvering thrusters
    BRAKES = "Brakes"
    LIGHT = "Light"
    GEAR = "Gear"


# =============================================================================
# Node Transform
# =============================================================================


@beartype
@dataclass
class NodeTransform:
    """World-space pose of a docking node.

    Attributes:
        position: Node position in world frame [m]
        forward: Unit vector the port faces (out of the port)
        up: Unit vector orthogonal to forward, fixing the roll of the port
    """
    position: NDArray[np.float64]
    forward: NDArray[np.float64]
    up: NDArray[np.float64]

    def __post_init__(self) -> None:
        for name in ("position", "forward", "up"):
            value = np.asarray(getattr(self, name), dtype=np.float64)
            if value.shape != (3,):
                raise ValueError(f"{name} must be shape (3,), got {value.shape}")
            setattr(self, name, value)

    @classmethod
    def from_axes(
        cls,
        position,
        forward,
        up,
    ) -> "NodeTransform":
        """Build a transform from loose inputs, normalizing the axes."""
        return cls(
            position=np.asarray(position, dtype=np.float64),
            forward=normalize_vector(np.asarray(forward, dtype=np.float64)),
            up=normalize_vector(np.asarray(up, dtype=np.float64)),
        )

    def copy(self) -> "NodeTransform":
        return NodeTransform(
            position=self.position.copy(),
            forward=self.forward.copy(),
            up=self.up.copy(),
        )

    def moved(
        self,
        rotation: NDArray[np.float64],
        pivot: NDArray[np.float64],
        new_pivot: NDArray[np.float64],
    ) -> "NodeTransform":
        """Transform rigidly attached to a body that rotates and translates.

        Args:
            rotation: Delta rotation quaternion applied about ``pivot``
            pivot: Body origin before the move [m]
            new_pivot: Body origin after the move [m]
        """
        return NodeTransform(
            position=new_pivot + rotate_vector(rotation, self.position - pivot),
            forward=rotate_vector(rotation, self.forward),
            up=rotate_vector(rotation, self.up),
        )

    def distance_to(self, other: "NodeTransform") -> float:
        return float(np.linalg.norm(self.position - other.position))


# =============================================================================
# Parts, Ports and Vessels
# =============================================================================


@dataclass(eq=False)
class DockingPort:
    """A docking-capable attachment point on a part.

    Attributes:
        node_type: Size/category tag, e.g. "size1"
        node_types: Additional tags this port also accepts
        state: Occupancy state reported by the host
        node_transform: World pose of the node, None when the host has not
            built it (e.g. part still being initialized)
        other_node: Port this one is currently joined to
        part: Part carrying the port
    """
    node_type: str = "size1"
    node_types: frozenset[str] = frozenset()
    state: PortState = PortState.READY
    node_transform: NodeTransform | None = None
    other_node: "DockingPort | None" = None
    part: "Part | None" = field(default=None, repr=False)

    @property
    def vessel(self) -> "Vessel | None":
        return self.part.vessel if self.part is not None else None

    @property
    def is_free(self) -> bool:
        """Ready and not joined to anything."""
        return self.other_node is None and self.state is PortState.READY

    def dock_with(self, other: "DockingPort") -> None:
        """Join two ports (host-side bookkeeping only)."""
        self.other_node = other
        other.other_node = self
        self.state = PortState.DOCKED
        other.state = PortState.DOCKED


@dataclass(eq=False)
class Part:
    """A vessel part.

    The root part carries the physics rigid body; other parts have none.
    """
    name: str
    docking_ports: list[DockingPort] = field(default_factory=list)
    rigid_body: RigidBodyState | None = None
    vessel: "Vessel | None" = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for port in self.docking_ports:
            port.part = self

    def add_docking_port(self, port: DockingPort) -> DockingPort:
        port.part = self
        self.docking_ports.append(port)
        return port


@dataclass(eq=False)
class Vessel:
    """A simulated rigid assembly of parts.

    Attributes:
        name: Display name
        parts: All parts; the first one is the root unless ``root_part`` is set
        loaded: True while the vessel is inside physics range
        situation: Situational state
        reference_part: Part the vessel is controlled from, if any
        action_groups: On/off state of the automatic-control systems
        id: Unique identity
    """
    name: str
    parts: list[Part] = field(default_factory=list)
    loaded: bool = True
    situation: Situation = Situation.ORBITING
    root_part: Part | None = None
    reference_part: Part | None = None
    action_groups: dict[ActionGroup, bool] = field(default_factory=dict)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        for part in self.parts:
            part.vessel = self
        if self.root_part is None and self.parts:
            self.root_part = self.parts[0]

    @classmethod
    def with_docking_port(
        cls,
        name: str,
        node: NodeTransform,
        root_state: RigidBodyState | None = None,
        node_type: str = "size1",
        node_types: Iterable[str] = (),
        control_from_port: bool = True,
        **kwargs,
    ) -> "Vessel":
        """Create a two-part vessel: a root body and a docking port part.

        Args:
            name: Vessel name
            node: World pose of the docking node
            root_state: Root rigid body (defaults to at rest at the origin)
            node_type: Port type tag
            node_types: Extra compatible tags
            control_from_port: Make the port part the reference part
            **kwargs: Passed to the Vessel constructor
        """
        if root_state is None:
            root_state = RigidBodyState.at_rest()

        root = Part(name=f"{name} core", rigid_body=root_state)
        port_part = Part(
            name=f"{name} docking port",
            docking_ports=[DockingPort(
                node_type=node_type,
                node_types=frozenset(node_types),
                node_transform=node,
            )],
        )

        vessel = cls(name=name, parts=[root, port_part], **kwargs)
        if control_from_port:
            vessel.reference_part = port_part
        return vessel

    @property
    def docking_ports(self) -> list[DockingPort]:
        return [port for part in self.parts for port in part.docking_ports]

    @property
    def root_rigid_body(self) -> RigidBodyState | None:
        return self.root_part.rigid_body if self.root_part is not None else None

    @property
    def is_surface_or_prelaunch(self) -> bool:
        return self.situation in SURFACE_SITUATIONS

    def set_action_group(self, group: ActionGroup, active: bool) -> None:
        self.action_groups[group] = active

    def action_group(self, group: ActionGroup) -> bool:
        return self.action_groups.get(group, False)
