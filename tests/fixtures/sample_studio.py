"""
Sample studio fixtures for pipeline testing.

Provides reusable data generators for:
- a stored yoga studio with scheduled services
- assistant replies (booking, service creation, broadcast, demo seeding)
- customer and owner signup forms

Times assume the fixed reference instant used by the suite:
Wednesday 2025-09-10 14:00 UTC (10:00 America/New_York).
"""

from typing import Any, Dict, Optional


def sample_business_data(
    business_id: str = "biz_yoga_1",
    zipcode: str = "10001",
) -> Dict[str, Any]:
    """
    Flow & Glow Yoga in New York.

    Vinyasa Flow (60 min) runs Wednesday 09:00 and Friday 09:30;
    Hatha Yoga (45 min) runs Tuesday 11:00.
    """
    return {
        "id": business_id,
        "name": "Flow & Glow Yoga",
        "type": "Yoga Studio",
        "zipcode": zipcode,
        "address": "123 Zen Rd",
        "timezone": "America/New_York",
        "pictures": [],
        "announcements": [],
        "services": [
            {
                "id": "svc_vinyasa",
                "name": "Vinyasa Flow",
                "description": "A dynamic flow class linking breath to movement.",
                "duration_minutes": 60,
                "price": {"amount": 20, "currency": "USD"},
                "category": "Yoga",
                "tags": [],
                "weekly_schedule": [
                    {"day": "Wednesday", "time": "09:00"},
                    {"day": "Friday", "time": "09:30"},
                ],
            },
            {
                "id": "svc_hatha",
                "name": "Hatha Yoga",
                "description": "Slow-paced classic postures.",
                "duration_minutes": 45,
                "price": {"amount": 15, "currency": "USD"},
                "category": "Yoga",
                "tags": ["beginner"],
                "weekly_schedule": [{"day": "Tuesday", "time": "11:00"}],
            },
        ],
        "appointments": [],
    }


def booking_reply(
    start_time: str = "2025-09-12T13:30:00Z",
    end_time: Optional[str] = "2025-09-12T14:30:00Z",
    email: str = "jane@example.com",
    name: str = "Jane Doe",
    status: str = "success",
) -> Dict[str, Any]:
    """A CREATE_APPOINTMENT reply for Friday's Vinyasa Flow."""
    return {
        "operation": "CREATE_APPOINTMENT",
        "role": "user",
        "status": status,
        "business": {"id": "biz_yoga_1", "name": "Flow & Glow Yoga", "category": "Yoga"},
        "request": {
            "appointment": {
                "service_name": "Vinyasa Flow",
                "customer": {"name": name, "email": email},
                "start_time": start_time,
            }
        },
        "response": {
            "assistant_reply": "You're booked for Vinyasa Flow on Friday at 9:30 AM.",
            "appointments": [
                {
                    "id": "model-chosen-id",
                    "service_id": "svc_vinyasa",
                    "service_name": "Vinyasa Flow",
                    "customer": {"name": name, "email": email, "phone": None},
                    "start_time": start_time,
                    "end_time": end_time,
                    "notes": None,
                    "status": "confirmed",
                }
            ],
            "notification": {
                "type": "APPOINTMENT_CREATED",
                "channels": ["dashboard", "email"],
                "message": f"New booking: Vinyasa Flow for {name}",
                "data": {"appointment_id": "model-chosen-id", "service_id": "svc_vinyasa"},
            },
        },
    }


def create_service_reply() -> Dict[str, Any]:
    """A CREATE_SERVICE reply whose timetable must be ignored."""
    return {
        "operation": "CREATE_SERVICE",
        "role": "business_owner",
        "status": "success",
        "response": {
            "assistant_reply": "Added Yin Yoga.",
            "services": [
                {
                    "id": None,
                    "name": "Yin Yoga",
                    "description": "Long, passive holds.",
                    "duration_minutes": 45,
                    "price": {"amount": 18, "currency": "USD"},
                    "category": "Yoga",
                    "tags": None,
                    "weekly_schedule": [{"day": "Sunday", "time": "23:00"}],
                }
            ],
            "notification": {"type": "SERVICE_CREATED", "channels": ["dashboard"]},
        },
    }


def broadcast_reply(message: str = "Studio closed Monday for maintenance.") -> Dict[str, Any]:
    return {
        "operation": "BROADCAST_MESSAGE",
        "role": "business_owner",
        "status": "success",
        "response": {
            "assistant_reply": "Broadcast queued.",
            "broadcast_result": {"message": message, "channel": "email", "status": "queued"},
        },
    }


def demo_seed_reply() -> Dict[str, Any]:
    return {
        "operation": "ASSIST",
        "role": "business_owner",
        "status": "success",
        "response": {
            "assistant_reply": "Here is some demo content to get you started.",
            "is_demo": True,
            "demo_services": [
                {"name": "Power Yoga", "duration_minutes": 60, "price": 22, "category": "Yoga"},
            ],
            "demo_photos": ["https://images.unsplash.com/photo-1544367567-0f2fcb009e0b"],
            "demo_broadcasts": [{"message": "Try your first class free!"}],
        },
    }


def customer_signup_form(**overrides: Any) -> Dict[str, Any]:
    form = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "address": "1 Main St",
        "zipcode": "10001",
        "password": "s3cret!",
        "confirm_password": "s3cret!",
    }
    form.update(overrides)
    return form


def owner_signup_form(**overrides: Any) -> Dict[str, Any]:
    form = {
        "business_name": "Iron Temple",
        "address": "9 Gym Ave",
        "zipcode": "10002",
        "email": "owner@example.com",
        "password": "lift-heavy",
        "category": "Fitness",
    }
    form.update(overrides)
    return form
