"""Exceptions raised by the host simulation.

Rejections from validation are not exceptions; these cover host state that
is unusable at the moment it is touched.
"""


class SnapDockError(Exception):
    """Base class for snapdock errors."""


class HostStateError(SnapDockError):
    """The host simulation cannot perform the requested change right now."""
