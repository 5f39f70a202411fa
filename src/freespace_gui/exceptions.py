from __future__ import annotations


class FreeSpaceError(Exception):
    """Base exception for FreeSpace errors."""


class EnumerationFailure(FreeSpaceError):
    """The mount table query is unavailable or returned something unparsable."""


class DeviceResolutionFailure(FreeSpaceError):
    """The live mount table has no usable source for a mount path."""


class SampleFailure(FreeSpaceError):
    """Filesystem size/free attributes could not be read for a mount path."""


class PreferenceUnavailable(FreeSpaceError):
    """A settings key is missing or holds an unusable value."""
