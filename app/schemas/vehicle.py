from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from app.core.enums import VehicleStatus, FuelType, Transmission, BodyType, Drivetrain


class VehicleCreate(BaseModel):
    make: str = Field(..., min_length=1, max_length=50)
    model: str = Field(..., min_length=1, max_length=50)
    year: int = Field(..., ge=1900, le=2100)
    price: int = Field(..., gt=0)
    mileage: int = Field(0, ge=0)
    fuel_type: FuelType
    transmission: Transmission
    body_type: BodyType
    drivetrain: Optional[Drivetrain] = None
    color: Optional[str] = Field(None, max_length=30)
    engine_size: Optional[str] = Field(None, max_length=20)
    features: List[str] = []
    images: List[str] = []
    description: Optional[str] = None
    featured: bool = False
    status: VehicleStatus = VehicleStatus.AVAILABLE
    vin: Optional[str] = Field(None, max_length=17)
    doors: Optional[int] = Field(None, ge=1, le=8)
    seats: Optional[int] = Field(None, ge=1, le=20)
    slug: Optional[str] = Field(None, max_length=160)


class VehicleUpdate(BaseModel):
    make: Optional[str] = Field(None, min_length=1, max_length=50)
    model: Optional[str] = Field(None, min_length=1, max_length=50)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    price: Optional[int] = Field(None, gt=0)
    mileage: Optional[int] = Field(None, ge=0)
    fuel_type: Optional[FuelType] = None
    transmission: Optional[Transmission] = None
    body_type: Optional[BodyType] = None
    drivetrain: Optional[Drivetrain] = None
    color: Optional[str] = None
    engine_size: Optional[str] = None
    features: Optional[List[str]] = None
    images: Optional[List[str]] = None
    description: Optional[str] = None
    featured: Optional[bool] = None
    status: Optional[VehicleStatus] = None
    vin: Optional[str] = None
    doors: Optional[int] = None
    seats: Optional[int] = None


class VehicleOut(BaseModel):
    id: int
    slug: Optional[str]
    make: str
    model: str
    year: int
    price: int
    mileage: int
    fuel_type: FuelType
    transmission: Transmission
    body_type: BodyType
    drivetrain: Optional[Drivetrain] = None
    color: Optional[str] = None
    engine_size: Optional[str] = None
    features: List[str] = []
    images: List[str] = []
    description: Optional[str] = None
    featured: bool
    status: VehicleStatus
    vin: Optional[str] = None
    doors: Optional[int] = None
    seats: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class VehicleFilters(BaseModel):
    query: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    body_type: Optional[str] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    color: Optional[str] = None
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    min_mileage: Optional[int] = None
    max_mileage: Optional[int] = None
    featured: Optional[bool] = None
    status: List[VehicleStatus] = [VehicleStatus.AVAILABLE]
