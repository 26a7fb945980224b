"""Eligibility checks run before a vessel is snapped onto a docking port.

The checks run in a fixed order and the first failure wins, so the operator
always sees the most basic problem first ("no target" before "too far").
Each check is a plain function taking the shared ``SnapContext`` and the
config; checks that resolve something (the source port, the target vessel)
store it on the context for the checks after them.

Example:
    >>> from snapdock.validation import validate
    >>>
    >>> result = validate(scene.active_vessel, scene.target)
    >>> if not result.ok:
    ...     print(result.reason)
    ... else:
    ...     candidate = result.candidate
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable

from beartype import beartype

from snapdock.config import SnapConfig
from snapdock.vessel import DockingPort, Vessel

logger = logging.getLogger(__name__)

# =============================================================================
# Results
# =============================================================================


@dataclass(frozen=True)
class SnapCandidate:
    """Everything the solver needs once all checks have passed."""
    source_vessel: Vessel
    source_port: DockingPort
    target_vessel: Vessel
    target_port: DockingPort
    distance: float


@dataclass(frozen=True)
class Proceed:
    """All checks passed."""
    candidate: SnapCandidate

    ok: ClassVar[bool] = True
    reason: ClassVar[str | None] = None

    def summary(self) -> str:
        c = self.candidate
        return (
            f"Proceed: {c.source_vessel.name} -> {c.target_vessel.name} "
            f"({c.source_port.node_type}/{c.target_port.node_type}, {c.distance:.1f} m)"
        )


@dataclass(frozen=True)
class Rejected:
    """A check failed.

    Attributes:
        reason: Operator-facing explanation
        check: Name of the failing check
    """
    reason: str
    check: str = ""

    ok: ClassVar[bool] = False
    candidate: ClassVar[SnapCandidate | None] = None

    def summary(self) -> str:
        return f"Rejected by {self.check}: {self.reason}"


ValidationResult = Proceed | Rejected


# =============================================================================
# Selection Providers
# =============================================================================


@runtime_checkable
class ControlSelection(Protocol):
    """Answers "which vessel is the player controlling"."""

    @property
    def active_vessel(self) -> Vessel | None:
        ...


@runtime_checkable
class TargetSelection(Protocol):
    """Answers "what has the player set as target"."""

    @property
    def target(self) -> object | None:
        ...


# =============================================================================
# Check Context
# =============================================================================


@dataclass
class SnapContext:
    """Inputs to the checks plus what they resolve along the way."""
    active_vessel: Vessel | None
    target: object | None
    source_port: DockingPort | None = None
    target_port: DockingPort | None = None
    target_vessel: Vessel | None = None
    distance: float | None = None

    def to_candidate(self) -> SnapCandidate:
        return SnapCandidate(
            source_vessel=self.active_vessel,
            source_port=self.source_port,
            target_vessel=self.target_vessel,
            target_port=self.target_port,
            distance=self.distance,
        )


# =============================================================================
# Helpers
# =============================================================================


@beartype
def ports_compatible(a: DockingPort, b: DockingPort) -> bool:
    """Check whether two ports can mate.

    Compatible if the type tags match ignoring case, or if either port lists
    the other's tag among its additional types. Symmetric in ``a`` and ``b``.
    """
    if a.node_type.casefold() == b.node_type.casefold():
        return True
    if b.node_type in a.node_types:
        return True
    if a.node_type in b.node_types:
        return True
    return False


# =============================================================================
# Checks (in evaluation order)
# =============================================================================


def check_active_vessel(ctx: SnapContext, config: SnapConfig) -> str | None:
    if ctx.active_vessel is None:
        return "No active vessel."
    return None


def check_source_port(ctx: SnapContext, config: SnapConfig) -> str | None:
    """Resolve the source port from the part the vessel is controlled from."""
    control_part = ctx.active_vessel.reference_part
    if control_part is None:
        return "No source selected. Use 'Control from here' on the source docking port."

    if not control_part.docking_ports:
        return "The source is not a docking port. Use 'Control from here' on the source docking port."

    ctx.source_port = control_part.docking_ports[0]
    return None


def check_target_selected(ctx: SnapContext, config: SnapConfig) -> str | None:
    if ctx.target is None:
        return "No target selected. Use 'Set as Target' on the destination docking port."
    return None


def check_target_is_port(ctx: SnapContext, config: SnapConfig) -> str | None:
    if not isinstance(ctx.target, DockingPort):
        return "The target is not a docking port. Use 'Set as Target' on the destination docking port."

    ctx.target_port = ctx.target
    return None


def check_target_vessel(ctx: SnapContext, config: SnapConfig) -> str | None:
    target_vessel = ctx.target_port.vessel
    if target_vessel is None:
        return "Target docking port has no vessel."
    if target_vessel is ctx.active_vessel:
        return "Target docking port is on the same vessel."

    ctx.target_vessel = target_vessel
    return None


def check_loaded(ctx: SnapContext, config: SnapConfig) -> str | None:
    if not ctx.active_vessel.loaded or not ctx.target_vessel.loaded:
        return "Both vessels must be loaded (in physics range)."
    return None


def check_situation(ctx: SnapContext, config: SnapConfig) -> str | None:
    if ctx.active_vessel.is_surface_or_prelaunch or ctx.target_vessel.is_surface_or_prelaunch:
        return "Surface / prelaunch situations are not supported (orbit-only for now)."
    return None


def check_source_ready(ctx: SnapContext, config: SnapConfig) -> str | None:
    if not ctx.source_port.is_free:
        return f"Source port not ready (state={ctx.source_port.state})."
    return None


def check_target_ready(ctx: SnapContext, config: SnapConfig) -> str | None:
    if not ctx.target_port.is_free:
        return f"Target port not ready (state={ctx.target_port.state})."
    return None


def check_compatible(ctx: SnapContext, config: SnapConfig) -> str | None:
    src, dst = ctx.source_port, ctx.target_port
    if not ports_compatible(src, dst):
        return f"Ports not compatible (src={src.node_type}, dst={dst.node_type})."
    return None


def check_transforms(ctx: SnapContext, config: SnapConfig) -> str | None:
    if ctx.source_port.node_transform is None or ctx.target_port.node_transform is None:
        return "Docking node transforms not available (nodeTransform is null)."
    return None


def check_distance(ctx: SnapContext, config: SnapConfig) -> str | None:
    distance = ctx.source_port.node_transform.distance_to(ctx.target_port.node_transform)
    if distance > config.max_snap_distance:
        return (
            f"Too far apart ({distance:.1f} m). "
            f"Get within {config.max_snap_distance:.0f} m first."
        )

    ctx.distance = distance
    return None


def check_root_rigid_body(ctx: SnapContext, config: SnapConfig) -> str | None:
    if ctx.active_vessel.root_rigid_body is None:
        return "Active vessel has no root rigid body."
    return None


Check = Callable[[SnapContext, SnapConfig], "str | None"]

CHECKS: tuple[Check, ...] = (
    check_active_vessel,
    check_source_port,
    check_target_selected,
    check_target_is_port,
    check_target_vessel,
    check_loaded,
    check_situation,
    check_source_ready,
    check_target_ready,
    check_compatible,
    check_transforms,
    check_distance,
    check_root_rigid_body,
)


# =============================================================================
# Validation
# =============================================================================


@beartype
def list_checks() -> list[str]:
    """List check names in evaluation order."""
    return [check.__name__ for check in CHECKS]


@beartype
def validate(
    active_vessel: Vessel | None,
    target: object | None,
    config: SnapConfig | None = None,
) -> ValidationResult:
    """Run every eligibility check in order.

    Reads the vessels and ports only; nothing is modified.

    Args:
        active_vessel: Vessel under control (the "controlled vessel" query)
        target: Currently targeted object (the "target" query); anything the
            host lets the player target, only a DockingPort passes
        config: Limits to check against

    Returns:
        Proceed with the resolved candidate, or Rejected with the reason of
        the first failing check
    """
    config = config or SnapConfig()
    ctx = SnapContext(active_vessel=active_vessel, target=target)

    for check in CHECKS:
        reason = check(ctx, config)
        if reason is not None:
            logger.debug("%s failed: %s", check.__name__, reason)
            return Rejected(reason=reason, check=check.__name__)

    return Proceed(candidate=ctx.to_candidate())


@beartype
def validate_selection(
    control: ControlSelection,
    targeting: TargetSelection,
    config: SnapConfig | None = None,
) -> ValidationResult:
    """Query both selection providers once and validate what they return."""
    return validate(control.active_vessel, targeting.target, config)
