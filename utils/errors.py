"""Exception hierarchy shared by the cloud and camera packages."""

from __future__ import annotations


class TouchError(Exception):
    """Base class for every error raised by this project."""


class ConfigurationError(TouchError):
    """A required collaborator or setting is missing at construction time."""


class NoSeedFoundError(TouchError):
    """Region growing found no point above the seed height filter."""


class CaptureTimeoutError(TouchError, TimeoutError):
    """A coalesced waiter gave up before a fresh capture completed."""


class CaptureCancelledError(TouchError):
    """The caller cancelled while waiting for a coalesced capture."""


class UpstreamCaptureError(TouchError):
    """The wrapped source camera failed to produce a point cloud."""


class UnsupportedOperationError(TouchError):
    """The component does not provide the requested operation."""
