import math
from typing import Any, Optional
from pydantic import BaseModel
from app.models.vehicle import Vehicle
from app.models.contact import Contact, VehicleInquiry
from app.models.testimonial import Testimonial
from app.models.blog_post import BlogPost
from app.models.inventory_alert import InventoryAlert
from app.schemas.vehicle import VehicleOut, Pagination
from app.schemas.contact import ContactOut, InquiryOut
from app.schemas.testimonial import TestimonialOut, TestimonialVehicle
from app.schemas.blog import BlogPostOut
from app.schemas.inventory_alert import InventoryAlertOut

WORDS_PER_MINUTE = 200


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


def success_response(data: Any = None, message: Optional[str] = None, **extra) -> dict:
    body = {"success": True, "data": _jsonable(data)}
    if message:
        body["message"] = message
    body.update({k: _jsonable(v) for k, v in extra.items()})
    return body


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = math.ceil(total / limit) if limit else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_prev=page > 1,
    )


def build_vehicle_response(vehicle: Vehicle) -> VehicleOut:
    return VehicleOut(
        id=vehicle.id,
        slug=vehicle.slug,
        make=vehicle.make,
        model=vehicle.model,
        year=vehicle.year,
        price=vehicle.price,
        mileage=vehicle.mileage,
        fuel_type=vehicle.fuel_type,
        transmission=vehicle.transmission,
        body_type=vehicle.body_type,
        drivetrain=vehicle.drivetrain,
        color=vehicle.color,
        engine_size=vehicle.engine_size,
        features=vehicle.features or [],
        images=vehicle.images or [],
        description=vehicle.description,
        featured=vehicle.featured,
        status=vehicle.status,
        vin=vehicle.vin,
        doors=vehicle.doors,
        seats=vehicle.seats,
        created_at=vehicle.created_at,
        updated_at=vehicle.updated_at,
    )


def build_vehicle_response_list(vehicles: list) -> list:
    return [build_vehicle_response(v) for v in vehicles]


def build_contact_response(contact: Contact) -> ContactOut:
    return ContactOut(
        id=contact.id,
        name=contact.name,
        email=contact.email,
        phone=contact.phone,
        message=contact.message,
        subject=contact.subject,
        status=contact.status,
        client_ip=contact.client_ip,
        created_at=contact.created_at,
    )


def build_inquiry_response(inquiry: VehicleInquiry) -> InquiryOut:
    return InquiryOut(
        id=inquiry.id,
        vehicle_id=inquiry.vehicle_id,
        name=inquiry.name,
        email=inquiry.email,
        phone=inquiry.phone,
        message=inquiry.message,
        inquiry_type=inquiry.inquiry_type,
        status=inquiry.status,
        created_at=inquiry.created_at,
    )


def build_testimonial_response(testimonial: Testimonial, vehicle: Optional[Vehicle] = None) -> TestimonialOut:
    return TestimonialOut(
        id=testimonial.id,
        customer_name=testimonial.customer_name,
        rating=testimonial.rating,
        title=testimonial.title,
        content=testimonial.content,
        photos=testimonial.photos or [],
        location=testimonial.location,
        is_verified=testimonial.is_verified,
        is_approved=testimonial.is_approved,
        is_public=testimonial.is_public,
        vehicle_id=testimonial.vehicle_id,
        vehicle=TestimonialVehicle(make=vehicle.make, model=vehicle.model, year=vehicle.year) if vehicle else None,
        created_at=testimonial.created_at,
    )


def estimated_read_time(content: str) -> int:
    return max(1, math.ceil(len(content or "") / WORDS_PER_MINUTE))


def build_blog_post_response(post: BlogPost) -> BlogPostOut:
    return BlogPostOut(
        id=post.id,
        title=post.title,
        slug=post.slug,
        excerpt=post.excerpt,
        content=post.content,
        featured_image=post.featured_image,
        images=post.images or [],
        author=post.author,
        category=post.category,
        tags=post.tags or [],
        is_published=post.is_published,
        published_at=post.published_at,
        views=post.views,
        seo_title=post.seo_title,
        seo_description=post.seo_description,
        estimated_read_time=estimated_read_time(post.content),
        created_at=post.created_at,
    )


def build_alert_response(alert: InventoryAlert) -> InventoryAlertOut:
    return InventoryAlertOut(
        id=alert.id,
        customer_email=alert.customer_email,
        customer_name=alert.customer_name,
        vehicle_make=alert.vehicle_make,
        vehicle_model=alert.vehicle_model,
        max_price=alert.max_price,
        min_year=alert.min_year,
        max_mileage=alert.max_mileage,
        body_type=alert.body_type,
        fuel_type=alert.fuel_type,
        is_active=alert.is_active,
        last_notified=alert.last_notified,
        created_at=alert.created_at,
    )
