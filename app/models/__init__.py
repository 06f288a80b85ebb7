from app.models.base import Base
from app.models.user import User
from app.models.audit import Audit
from app.models.vehicle import Vehicle
from app.models.contact import Contact, VehicleInquiry
from app.models.inventory_alert import InventoryAlert, AlertNotification
from app.models.testimonial import Testimonial
from app.models.blog_post import BlogPost
from app.models.setting import Setting

__all__ = [
    "Base",
    "User",
    "Audit",
    "Vehicle",
    "Contact",
    "VehicleInquiry",
    "InventoryAlert",
    "AlertNotification",
    "Testimonial",
    "BlogPost",
    "Setting",
]
