from sqlalchemy import Column, String, Integer, Boolean, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from app.models.base import BaseModel


class Testimonial(BaseModel):
    __tablename__ = "testimonials"
    vehicle_id = Column(ForeignKey("vehicles.id", ondelete="SET NULL"), nullable=True)
    vehicle = relationship("Vehicle", backref="testimonials")
    customer_name = Column(String(120), nullable=False)
    customer_email = Column(String(254))
    rating = Column(Integer, nullable=False)
    title = Column(String(200))
    content = Column(Text, nullable=False)
    photos = Column(JSON, nullable=False, default=list)
    location = Column(String(120))
    is_verified = Column(Boolean, nullable=False, default=False)
    is_approved = Column(Boolean, nullable=False, default=False)
    is_public = Column(Boolean, nullable=False, default=True)
