"""
autoclick/errors.py - What can go wrong, and how bad it is.

CaptureError  - no snapshot, nothing to match against. Scan loop dies.
LoadError     - one icon file is broken. Skip it, keep the rest.
ConfigError   - icons.json is unusable. Can't start a mode without targets.
PointerAbort  - the user slammed the mouse into a screen corner. Stop scanning.
"""


class AutoClickError(Exception):
    """Base for everything this package raises on purpose."""


class CaptureError(AutoClickError):
    pass


class LoadError(AutoClickError):
    pass


class ConfigError(AutoClickError):
    pass


class PointerAbort(AutoClickError):
    pass
