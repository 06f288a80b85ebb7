from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime


class TestimonialCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=120)
    customer_email: Optional[EmailStr] = None
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = Field(None, max_length=200)
    content: str = Field(..., min_length=1)
    photos: List[str] = []
    location: Optional[str] = Field(None, max_length=120)
    vehicle_id: Optional[int] = None


class TestimonialModeration(BaseModel):
    is_approved: Optional[bool] = None
    is_public: Optional[bool] = None
    is_verified: Optional[bool] = None


class TestimonialVehicle(BaseModel):
    make: str
    model: str
    year: int


class TestimonialOut(BaseModel):
    id: int
    customer_name: str
    rating: int
    title: Optional[str]
    content: str
    photos: List[str] = []
    location: Optional[str]
    is_verified: bool
    is_approved: bool
    is_public: bool
    vehicle_id: Optional[int]
    vehicle: Optional[TestimonialVehicle] = None
    created_at: datetime
