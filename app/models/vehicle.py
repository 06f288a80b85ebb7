from sqlalchemy import Column, String, Integer, Boolean, Text, JSON, Enum
from app.models.base import BaseModel
from app.core.enums import VehicleStatus, FuelType, Transmission, BodyType, Drivetrain


class Vehicle(BaseModel):
    __tablename__ = "vehicles"

    slug = Column(String(160), unique=True, index=True)
    make = Column(String(50), nullable=False, index=True)
    model = Column(String(50), nullable=False)
    year = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)
    mileage = Column(Integer, nullable=False, default=0)
    fuel_type = Column(Enum(FuelType), nullable=False)
    transmission = Column(Enum(Transmission), nullable=False)
    body_type = Column(Enum(BodyType), nullable=False, index=True)
    drivetrain = Column(Enum(Drivetrain), nullable=True)
    color = Column(String(30), nullable=True)
    engine_size = Column(String(20), nullable=True)
    features = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    description = Column(Text, nullable=True)
    featured = Column(Boolean, nullable=False, default=False)
    status = Column(Enum(VehicleStatus), nullable=False, default=VehicleStatus.AVAILABLE, index=True)
    vin = Column(String(17), nullable=True)
    doors = Column(Integer, nullable=True)
    seats = Column(Integer, nullable=True)
