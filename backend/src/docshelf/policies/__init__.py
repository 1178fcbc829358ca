"""Authorization policies"""

from .document_policy import (
    DocumentAction,
    allows,
    authorize,
    can_change_visibility,
    can_download,
    can_view,
    find_grant,
)

__all__ = [
    "DocumentAction",
    "allows",
    "authorize",
    "can_change_visibility",
    "can_download",
    "can_view",
    "find_grant",
]
