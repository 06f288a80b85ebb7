from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime
from app.core.enums import BodyType, FuelType


class InventoryAlertCreate(BaseModel):
    customer_email: EmailStr
    customer_name: str = Field(..., min_length=2, max_length=100)
    vehicle_make: Optional[str] = Field(None, max_length=50)
    vehicle_model: Optional[str] = Field(None, max_length=50)
    max_price: Optional[int] = Field(None, gt=0)
    min_year: Optional[int] = Field(None, ge=1900)
    max_mileage: Optional[int] = Field(None, ge=0)
    body_type: Optional[BodyType] = None
    fuel_type: Optional[FuelType] = None


class AlertMatchRequest(BaseModel):
    vehicle_id: int


class InventoryAlertOut(BaseModel):
    id: int
    customer_email: str
    customer_name: str
    vehicle_make: Optional[str]
    vehicle_model: Optional[str]
    max_price: Optional[int]
    min_year: Optional[int]
    max_mileage: Optional[int]
    body_type: Optional[BodyType]
    fuel_type: Optional[FuelType]
    is_active: bool
    last_notified: Optional[datetime]
    created_at: datetime
