"""Configuration for the snap-dock operation.

Example:
    >>> from snapdock.config import SnapConfig
    >>>
    >>> config = SnapConfig()
    >>> config.max_snap_distance
    500.0
    >>> SnapConfig.from_dict({"max_snap_distance": 250, "hotkey": "ctrl+shift+k"})
"""

from collections.abc import Collection, Mapping
from dataclasses import dataclass, field
from typing import Any

from beartype import beartype

from snapdock.vessel import ActionGroup

# =============================================================================
# Constants
# =============================================================================

MAX_SNAP_DISTANCE_M: float = 500.0  # Farthest port separation accepted [m]
ALIGN_SEPARATION_M: float = 1.0  # Standoff between ports after the snap [m]
CLOSING_SPEED_MPS: float = 0.15  # Approach speed along the docking axis [m/s]

FAILURE_MESSAGE_DURATION_S: float = 6.0
SUCCESS_MESSAGE_DURATION_S: float = 4.0

# Modifier names expand to either physical key
MODIFIER_KEYS: dict[str, tuple[str, ...]] = {
    "ctrl": ("left_ctrl", "right_ctrl"),
    "alt": ("left_alt", "right_alt"),
    "shift": ("left_shift", "right_shift"),
}


# =============================================================================
# Hotkey
# =============================================================================


@beartype
@dataclass(frozen=True)
class HotkeyChord:
    """Modifier-key chord that triggers the snap.

    The chord fires when every modifier group has at least one key held and
    the main key went down during the current update step. Holding the chord
    down does not fire again.

    Attributes:
        key: Main key name (lower case)
        modifiers: One tuple of alternative key names per required modifier
    """
    key: str
    modifiers: tuple[tuple[str, ...], ...] = ()

    @classmethod
    def parse(cls, chord: str) -> "HotkeyChord":
        """Parse a chord such as ``"ctrl+alt+d"``.

        The last token is the main key; the others must be modifier names.
        """
        tokens = [token.strip().lower() for token in chord.split("+") if token.strip()]
        if not tokens:
            raise ValueError(f"Empty hotkey chord: {chord!r}")

        *modifier_names, key = tokens
        modifiers = []
        for name in modifier_names:
            if name not in MODIFIER_KEYS:
                valid = ", ".join(sorted(MODIFIER_KEYS))
                raise ValueError(f"Unknown modifier {name!r} in {chord!r}. Valid: {valid}")
            modifiers.append(MODIFIER_KEYS[name])

        return cls(key=key, modifiers=tuple(modifiers))

    @classmethod
    def ctrl_alt(cls, key: str) -> "HotkeyChord":
        return cls.parse(f"ctrl+alt+{key}")

    def is_triggered(self, held: Collection[str], pressed: Collection[str]) -> bool:
        """Check the chord for one update step.

        Args:
            held: Keys currently held down
            pressed: Keys that went down during this step

        Returns:
            True only on the key-down edge of the main key
        """
        if self.key not in pressed:
            return False
        return all(any(key in held for key in group) for group in self.modifiers)

    def __str__(self) -> str:
        names = [group[0].split("_")[-1] for group in self.modifiers]
        return "+".join(name.capitalize() for name in [*names, self.key])


# =============================================================================
# Snap Configuration
# =============================================================================


@beartype
@dataclass(frozen=True)
class SnapConfig:
    """Tunables for validation, alignment and reporting.

    Attributes:
        max_snap_distance: Maximum distance between the two ports [m]
        align_separation: Distance left between the ports along the target
            port's forward axis after the snap [m]
        closing_speed: Speed toward the target port after the snap [m/s]
        disabled_action_groups: Control systems switched off after the snap
        hotkey: Chord that triggers the snap
        failure_message_duration: On-screen time for rejections and errors [s]
        success_message_duration: On-screen time for the success notice [s]
    """
    max_snap_distance: float = MAX_SNAP_DISTANCE_M
    align_separation: float = ALIGN_SEPARATION_M
    closing_speed: float = CLOSING_SPEED_MPS
    disabled_action_groups: tuple[ActionGroup, ...] = (ActionGroup.SAS, ActionGroup.RCS)
    hotkey: HotkeyChord = field(default_factory=lambda: HotkeyChord.ctrl_alt("d"))
    failure_message_duration: float = FAILURE_MESSAGE_DURATION_S
    success_message_duration: float = SUCCESS_MESSAGE_DURATION_S

    def __post_init__(self) -> None:
        if self.max_snap_distance <= 0:
            raise ValueError(f"max_snap_distance must be positive, got {self.max_snap_distance}")
        if self.align_separation < 0:
            raise ValueError(f"align_separation must be non-negative, got {self.align_separation}")
        if self.closing_speed < 0:
            raise ValueError(f"closing_speed must be non-negative, got {self.closing_speed}")
        if self.failure_message_duration <= 0 or self.success_message_duration <= 0:
            raise ValueError("Message durations must be positive")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SnapConfig":
        """Build a config from host-provided settings.

        Unknown keys raise ValueError. Numbers may be given as ints,
        action groups by name ("SAS") and the hotkey as a chord string.
        """
        valid = {
            "max_snap_distance",
            "align_separation",
            "closing_speed",
            "disabled_action_groups",
            "hotkey",
            "failure_message_duration",
            "success_message_duration",
        }
        unknown = set(data) - valid
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}. Valid: {sorted(valid)}")

        kwargs: dict[str, Any] = {}
        for key, value in data.items():
            if key == "disabled_action_groups":
                kwargs[key] = tuple(_action_group(name) for name in value)
            elif key == "hotkey":
                kwargs[key] = value if isinstance(value, HotkeyChord) else HotkeyChord.parse(value)
            else:
                kwargs[key] = float(value)

        return cls(**kwargs)


def _action_group(name: str | ActionGroup) -> ActionGroup:
    if isinstance(name, ActionGroup):
        return name
    for group in ActionGroup:
        if group.value.lower() == name.lower() or group.name.lower() == name.lower():
            return group
    valid = ", ".join(group.value for group in ActionGroup)
    raise ValueError(f"Unknown action group: {name!r}. Valid: {valid}")
