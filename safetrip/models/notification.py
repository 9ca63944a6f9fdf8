from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class NotificationType(str, Enum):
    LIKE = "like"
    COMMENT = "comment"
    FOLLOW = "follow"
    STORY_SHARE = "story_share"


class Notification(BaseModel):
    """Social-style notice (like, comment, follow, story share)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    user_id: str
    actor_id: str
    actor_name: str
    actor_avatar: Optional[str] = None
    type: NotificationType
    content: str
    story_id: Optional[str] = None
    story_title: Optional[str] = None
    is_read: bool = False
    created_at: datetime
