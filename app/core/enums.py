from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    STAFF = "STAFF"

    def __str__(self):
        return self.value


class VehicleStatus(str, Enum):
    AVAILABLE = "AVAILABLE"
    SOLD = "SOLD"
    RESERVED = "RESERVED"
    PENDING = "PENDING"

    def __str__(self):
        return self.value


class FuelType(str, Enum):
    PETROL = "PETROL"
    DIESEL = "DIESEL"
    ELECTRIC = "ELECTRIC"
    HYBRID = "HYBRID"
    PLUGIN_HYBRID = "PLUGIN_HYBRID"

    def __str__(self):
        return self.value


class Transmission(str, Enum):
    MANUAL = "MANUAL"
    AUTOMATIC = "AUTOMATIC"
    CVT = "CVT"
    DUAL_CLUTCH = "DUAL_CLUTCH"

    def __str__(self):
        return self.value


class BodyType(str, Enum):
    SEDAN = "SEDAN"
    SUV = "SUV"
    HATCHBACK = "HATCHBACK"
    COUPE = "COUPE"
    WAGON = "WAGON"
    VAN = "VAN"
    TRUCK = "TRUCK"
    CONVERTIBLE = "CONVERTIBLE"

    def __str__(self):
        return self.value


class Drivetrain(str, Enum):
    FWD = "FWD"
    RWD = "RWD"
    AWD = "AWD"
    FOUR_WD = "4WD"

    def __str__(self):
        return self.value


class LeadStatus(str, Enum):
    NEW = "NEW"
    CONTACTED = "CONTACTED"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CLOSED = "CLOSED"

    def __str__(self):
        return self.value


class InquiryType(str, Enum):
    GENERAL = "GENERAL"
    CONTACT_FORM = "CONTACT_FORM"
    TEST_DRIVE = "TEST_DRIVE"
    FINANCING = "FINANCING"
    TRADE_IN = "TRADE_IN"

    def __str__(self):
        return self.value


class NotificationType(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    def __str__(self):
        return self.value


class NotificationCategory(str, Enum):
    INQUIRY = "inquiry"
    VEHICLE = "vehicle"
    SALE = "sale"
    SYSTEM = "system"
    APPOINTMENT = "appointment"

    def __str__(self):
        return self.value


class AdjustmentType(str, Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED = "FIXED"

    def __str__(self):
        return self.value


class MarketPosition(str, Enum):
    ABOVE = "ABOVE"
    BELOW = "BELOW"
    COMPETITIVE = "COMPETITIVE"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_VEHICLE = "create_vehicle"
    UPDATE_VEHICLE = "update_vehicle"
    CREATE_BLOG_POST = "create_blog_post"
    UPDATE_CONTACT = "update_contact"
    UPDATE_INQUIRY = "update_inquiry"
    MODERATE_TESTIMONIAL = "moderate_testimonial"
    CREATE_PRICING_RULE = "create_pricing_rule"
    UPDATE_PRICING_RULE = "update_pricing_rule"
    DELETE_NOTIFICATION = "delete_notification"
    LOGIN = "login"

    def __str__(self):
        return self.value
