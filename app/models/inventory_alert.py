from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel, utcnow
from app.core.enums import BodyType, FuelType


class InventoryAlert(BaseModel):
    __tablename__ = "inventory_alerts"

    customer_email = Column(String(254), nullable=False, index=True)
    customer_name = Column(String(120), nullable=False)

    # Null criteria impose no constraint
    vehicle_make = Column(String(50), nullable=True)
    vehicle_model = Column(String(50), nullable=True)
    max_price = Column(Integer, nullable=True)
    min_year = Column(Integer, nullable=True)
    max_mileage = Column(Integer, nullable=True)
    body_type = Column(Enum(BodyType), nullable=True)
    fuel_type = Column(Enum(FuelType), nullable=True)

    is_active = Column(Boolean, nullable=False, default=True)
    last_notified = Column(DateTime(timezone=True), nullable=True)


class AlertNotification(BaseModel):
    __tablename__ = "alert_notifications"

    alert_id = Column(ForeignKey("inventory_alerts.id", ondelete="CASCADE"), nullable=False)
    vehicle_id = Column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    alert = relationship("InventoryAlert", backref="notifications")
    method = Column(String(20), nullable=False, default="email")
    sent_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
