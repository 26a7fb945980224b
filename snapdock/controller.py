"""Per-update entry point that ties the hotkey to validate, solve and apply.

The host calls ``SnapDockController.update`` once per update step with the
keys held and the keys that went down during that step. On the chord's
key-down edge the controller runs the snap once and reports the outcome on
screen and in the log.

Example:
    >>> from snapdock.controller import SnapDockController
    >>>
    >>> controller = SnapDockController(scene)
    >>> controller.update(held={"left_ctrl", "left_alt"}, pressed={"d"})
    >>> scene.messages.latest.text
    '[snapdock] Aligned (closing slowly).'
"""

import logging
from collections.abc import Collection
from dataclasses import dataclass, field

import numpy as np

from snapdock.alignment import AlignmentPlan, solve
from snapdock.config import SnapConfig
from snapdock.simulation.scene import FlightScene
from snapdock.validation import ValidationResult, validate_selection

logger = logging.getLogger(__name__)

MESSAGE_PREFIX = "[snapdock]"
SUCCESS_MESSAGE = "Aligned (closing slowly)."


@dataclass(frozen=True)
class SnapOutcome:
    """What one snap attempt did.

    Attributes:
        result: Validation result
        plan: Applied plan, None when validation rejected the attempt
    """
    result: ValidationResult
    plan: AlignmentPlan | None = None

    @property
    def applied(self) -> bool:
        return self.plan is not None


@dataclass
class SnapDockController:
    """Hotkey-driven snap for the scene's active vessel.

    Attributes:
        scene: Host scene providing selection, mutation and messages
        config: Limits, tunables and hotkey
    """
    scene: FlightScene
    config: SnapConfig = field(default_factory=SnapConfig)

    def update(self, held: Collection[str] = (), pressed: Collection[str] = ()) -> SnapOutcome | None:
        """Handle one host update step.

        Args:
            held: Keys currently held down
            pressed: Keys that went down during this step

        Returns:
            The outcome when a snap was attempted and completed or rejected;
            None when nothing ran or the attempt raised
        """
        if not self.scene.is_flight:
            return None
        if not self.config.hotkey.is_triggered(held, pressed):
            return None

        try:
            return self.attempt_snap()
        except Exception as ex:
            self.scene.messages.post(
                f"{MESSAGE_PREFIX} Error: {ex}",
                self.config.failure_message_duration,
            )
            logger.exception("Snap attempt failed")
            return None

    def attempt_snap(self) -> SnapOutcome:
        """Validate, solve and apply once, reporting the outcome."""
        result = validate_selection(self.scene, self.scene, self.config)
        if not result.ok:
            self._fail(result.reason)
            return SnapOutcome(result=result)

        candidate = result.candidate
        plan = solve(candidate, self.config)
        self.scene.apply_plan(
            candidate.source_vessel,
            plan,
            disable=self.config.disabled_action_groups,
        )

        logger.info(
            "Snapped %s to %s (%.1f m, roll %.1f deg)",
            candidate.source_vessel.name,
            candidate.target_vessel.name,
            candidate.distance,
            np.degrees(plan.roll_angle),
        )
        self.scene.messages.post(
            f"{MESSAGE_PREFIX} {SUCCESS_MESSAGE}",
            self.config.success_message_duration,
        )
        return SnapOutcome(result=result, plan=plan)

    def _fail(self, reason: str) -> None:
        self.scene.messages.post(
            f"{MESSAGE_PREFIX} {reason}",
            self.config.failure_message_duration,
        )
        logger.info("%s %s", MESSAGE_PREFIX, reason)
