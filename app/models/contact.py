from sqlalchemy import Column, String, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.models.base import BaseModel
from app.core.enums import LeadStatus, InquiryType


class Contact(BaseModel):
    __tablename__ = "contacts"
    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(40))
    message = Column(Text, nullable=False)
    subject = Column(String(255))
    status = Column(Enum(LeadStatus), nullable=False, default=LeadStatus.NEW)
    client_ip = Column(String(64))
    user_agent = Column(String(512))


class VehicleInquiry(BaseModel):
    __tablename__ = "vehicle_inquiries"
    vehicle_id = Column(ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False)
    vehicle = relationship("Vehicle", backref="inquiries")
    name = Column(String(120), nullable=False)
    email = Column(String(254), nullable=False)
    phone = Column(String(40), nullable=False, default="")
    message = Column(Text)
    inquiry_type = Column(Enum(InquiryType), nullable=False, default=InquiryType.GENERAL)
    status = Column(Enum(LeadStatus), nullable=False, default=LeadStatus.NEW)
    client_ip = Column(String(64))
