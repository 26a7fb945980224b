"""snapdock - Instant docking-port alignment for simulated vessels.

Validates that two docking ports may be joined, then snaps the active
vessel so its port faces the target port a short standoff away, with the
relative velocity nulled except for a slow closing drift.

Example:
    >>> from snapdock import FlightScene, NodeTransform, SnapDockController
    >>>
    >>> scene = FlightScene.rendezvous(
    ...     chaser_node=NodeTransform.from_axes([0, 0, 0], [1, 0, 0], [0, 1, 0]),
    ...     target_node=NodeTransform.from_axes([10, 0, 0], [-1, 0, 0], [0, 1, 0]),
    ... )
    >>> outcome = SnapDockController(scene).attempt_snap()
    >>> scene.active_vessel.docking_ports[0].node_transform.position  # ~[9, 0, 0]
"""

__version__ = "0.1.0"

# Solver
from snapdock.alignment import (
    AlignmentPlan,
    alignment_rotation,
    solve,
    solve_alignment,
)

# Configuration
from snapdock.config import HotkeyChord, SnapConfig

# Entry point
from snapdock.controller import SnapDockController, SnapOutcome

# Rigid body state
from snapdock.dynamics import RigidBodyState
from snapdock.errors import HostStateError, SnapDockError
from snapdock.logging_config import setup_logging

# Host simulation
from snapdock.simulation import FlightScene, GameScene, MessageBoard, ScreenMessage

# Validation
from snapdock.validation import (
    CHECKS,
    ControlSelection,
    Proceed,
    Rejected,
    SnapCandidate,
    TargetSelection,
    ValidationResult,
    list_checks,
    ports_compatible,
    validate,
    validate_selection,
)

# Vessel model
from snapdock.vessel import (
    ActionGroup,
    DockingPort,
    NodeTransform,
    Part,
    PortState,
    Situation,
    Vessel,
)

__all__ = [
    "__version__",
    # Solver
    "AlignmentPlan",
    "alignment_rotation",
    "solve",
    "solve_alignment",
    # Configuration
    "HotkeyChord",
    "SnapConfig",
    # Entry point
    "SnapDockController",
    "SnapOutcome",
    # State
    "RigidBodyState",
    # Errors
    "HostStateError",
    "SnapDockError",
    "setup_logging",
    # Host simulation
    "FlightScene",
    "GameScene",
    "MessageBoard",
    "ScreenMessage",
    # Validation
    "CHECKS",
    "ControlSelection",
    "Proceed",
    "Rejected",
    "SnapCandidate",
    "TargetSelection",
    "ValidationResult",
    "list_checks",
    "ports_compatible",
    "validate",
    "validate_selection",
    # Vessel model
    "ActionGroup",
    "DockingPort",
    "NodeTransform",
    "Part",
    "PortState",
    "Situation",
    "Vessel",
]
