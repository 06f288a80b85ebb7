from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.core.enums import NotificationType, NotificationCategory


class Notification(BaseModel):
    id: str
    type: NotificationType
    category: NotificationCategory
    title: str
    message: str
    action_url: Optional[str] = None
    metadata: dict = {}
    timestamp: datetime
    read: bool = False
