"""Models package - settings, Pydantic schemas and domain types."""

from .notification_types import NotificationType, RelatedModel, RelatedRef

__all__ = [
    "NotificationType",
    "RelatedModel",
    "RelatedRef",
]
