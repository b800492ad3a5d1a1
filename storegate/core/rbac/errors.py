"""Exceptions raised by storegate.

The evaluation engine itself never raises for bad or missing input; these
cover integrity problems at catalog load time and programming errors.
"""


class StoreGateError(Exception):
    """Base class for storegate errors."""


class CatalogLoadError(StoreGateError):
    """Raised when a permission catalog violates its integrity rules."""

    def __init__(self, message: str, *, permission_name: str = None):
        super().__init__(message)
        self.permission_name = permission_name


class MalformedActionListError(StoreGateError):
    """Raised by an action-list codec when the encoded form cannot be decoded."""

    def __init__(self, raw, reason: str):
        super().__init__(f"Malformed action list ({reason}): {raw!r}")
        self.raw = raw
        self.reason = reason
