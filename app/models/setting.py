from sqlalchemy import Column, String, Text
from app.models.base import BaseModel


class Setting(BaseModel):
    __tablename__ = "settings"
    key = Column(String(255), unique=True, nullable=False, index=True)
    value = Column(Text, nullable=False)
    category = Column(String(64), nullable=False, default="general", index=True)
