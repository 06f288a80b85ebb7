import re
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime
from app.core.enums import LeadStatus, InquiryType

NAME_PATTERN = re.compile(r"^[a-zA-ZÀ-ÿ\s'-]+$")
PHONE_PATTERN = re.compile(r"^\+?[0-9\s\-()]+$")


class ContactIn(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, min_length=8, max_length=20)
    message: str = Field(..., min_length=10, max_length=1000)
    vehicle_id: Optional[int] = None
    consent: bool
    honeypot: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_characters(cls, v: str) -> str:
        if not NAME_PATTERN.match(v):
            raise ValueError("Name contains invalid characters")
        return v

    @field_validator("phone")
    @classmethod
    def phone_format(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not PHONE_PATTERN.match(v):
            raise ValueError("Invalid phone number format")
        return v

    @field_validator("consent")
    @classmethod
    def consent_given(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must agree to the privacy policy")
        return v


class ContactOut(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str]
    message: str
    subject: Optional[str]
    status: LeadStatus
    client_ip: Optional[str] = None
    created_at: datetime


class InquiryOut(BaseModel):
    id: int
    vehicle_id: int
    name: str
    email: str
    phone: str
    message: Optional[str]
    inquiry_type: InquiryType
    status: LeadStatus
    created_at: datetime


class LeadStatusUpdate(BaseModel):
    status: LeadStatus
