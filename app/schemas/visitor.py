from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from app.stores.alerts import Frequency
from app.stores.recently_viewed import ViewSource


class CompareAdd(BaseModel):
    vehicle_id: int


class ViewedIn(BaseModel):
    vehicle_id: int
    source: ViewSource = "direct"


class SavedSearchIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    query: Optional[str] = None
    filters: dict = {}
    sort_by: Optional[str] = None
    notify_on_new: bool = False
    tags: List[str] = []


class SavedSearchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    query: Optional[str] = None
    filters: Optional[dict] = None
    sort_by: Optional[str] = None
    notify_on_new: Optional[bool] = None
    tags: Optional[List[str]] = None


class SearchPreferencesUpdate(BaseModel):
    filters: Optional[dict] = None
    sort_by: Optional[str] = Field(None, min_length=1, max_length=50)


class SearchHistoryIn(BaseModel):
    query: str = Field(..., max_length=200)


class ClientAlertIn(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=100)
    filters: dict = {}
    frequency: Frequency = "instant"


class ClientAlertUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    filters: Optional[dict] = None
    frequency: Optional[Frequency] = None
    is_active: Optional[bool] = None
