"""API routers for storegate."""

from . import session
from . import permissions
from . import pages

__all__ = [
    "session",
    "permissions",
    "pages",
]
