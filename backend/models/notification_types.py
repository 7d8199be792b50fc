"""Notification type definitions for in-app notifications."""

from enum import Enum
from typing import NamedTuple


class NotificationType(str, Enum):
    """Kinds of in-app notification a user can receive."""

    NEW_COMMENT = "new_comment"
    MENTION = "mention"
    REPLY = "reply"
    ISSUE_UPDATE = "issue_update"
    NEW_FOLLOWER = "new_follower"
    VOTE = "vote"
    POST_APPROVAL = "post_approval"
    ADMIN_MESSAGE = "admin_message"
    TOPIC_UPDATE = "topic_update"
    SYSTEM = "system"


class RelatedModel(str, Enum):
    """Entity kinds a notification can point at."""

    POST = "Post"
    COMMENT = "Comment"
    USER = "User"
    TOPIC = "Topic"


class RelatedRef(NamedTuple):
    """
    Reference from a notification to the entity it is about.

    A notification either has a full reference (kind and id) or none at all;
    the two columns are never set independently.
    """

    model: RelatedModel
    id: int

    @classmethod
    def from_columns(
        cls, model: RelatedModel | str | None, related_id: int | None
    ) -> "RelatedRef | None":
        """Rebuild a reference from its stored columns."""
        if model is None or related_id is None:
            return None
        return cls(RelatedModel(model), related_id)
