"""Host simulation for the snap operation.

Provides the flight scene that owns vessels, answers the selection queries,
applies alignment plans on rails and collects screen messages.

Example:
    >>> from snapdock.simulation import FlightScene
    >>>
    >>> scene = FlightScene.rendezvous(chaser_node=..., target_node=...)
    >>> with scene.on_rails(scene.active_vessel):
    ...     scene.set_position(scene.active_vessel, new_root_position)
"""

from snapdock.simulation.scene import (
    FlightScene,
    GameScene,
    MessageBoard,
    ScreenMessage,
)

__all__ = [
    "FlightScene",
    "GameScene",
    "MessageBoard",
    "ScreenMessage",
]
