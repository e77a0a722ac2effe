"""Demo content for empty tenants and empty neighbourhoods.

Two cases get demo content:
- a customer whose zipcode has no real business sees two demo tenants
  (these are built on the fly and never stored)
- a freshly signed-up owner gets demo services, pictures, an appointment
  and, for fitness businesses, a welcome announcement

Every record produced here carries ``is_demo=True``.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional

from core.contracts.studio import (
    Announcement,
    Appointment,
    Business,
    BusinessCategory,
    Customer,
    Price,
    Service,
    StudioPicture,
)
from core.logger import get_logger
from pipelines.studio_assistant.config import DEFAULT_TIMEZONE
from pipelines.studio_assistant.scheduling.schedule_generator import generate_weekly_schedule

logger = get_logger(__name__)

_UNSPLASH = "https://images.unsplash.com"


@dataclass
class OwnerDemoData:
    services: List[Service] = field(default_factory=list)
    appointments: List[Appointment] = field(default_factory=list)
    pictures: List[StudioPicture] = field(default_factory=list)
    announcements: List[Announcement] = field(default_factory=list)


def _demo_service(
    service_id: str,
    name: str,
    description: str,
    duration_minutes: int,
    amount: float,
    category: str,
) -> Service:
    return Service(
        id=service_id,
        name=name,
        description=description,
        duration_minutes=duration_minutes,
        price=Price(amount=amount, currency="USD"),
        category=category,
        tags=[],
        is_demo=True,
    )


def _schedule_all(services: List[Service], rng: random.Random) -> List[Service]:
    """Give each service a schedule that avoids all earlier ones."""
    scheduled: List[Service] = []
    for service in services:
        schedule = generate_weekly_schedule(scheduled, service.duration_minutes, rng)
        scheduled.append(service.model_copy(update={"weekly_schedule": schedule}))
    return scheduled


def _picture(picture_id: str, path: str, caption: str) -> StudioPicture:
    return StudioPicture(id=picture_id, url=f"{_UNSPLASH}/{path}", caption=caption, is_demo=True)


def demo_businesses_for_zipcode(
    zipcode: str,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> List[Business]:
    """
    A demo yoga studio and a demo gym located in ``zipcode``.

    Args:
        zipcode: The customer's zipcode.
        rng: Random source for schedule generation.
        now: Timestamp for the gym's opening announcement.

    Returns:
        Two businesses flagged ``is_demo``.
    """
    rng = rng or random.Random()
    now = now or datetime.now().astimezone()

    yoga_services = _schedule_all([
        _demo_service("demo_svc_1", "Vinyasa Flow",
                      "A dynamic flow class linking breath to movement.", 60, 20, "Yoga"),
        _demo_service("demo_svc_2", "Meditation Circle",
                      "A 30-minute guided meditation session.", 30, 10, "Meditation"),
    ], rng)
    gym_services = _schedule_all([
        _demo_service("demo_svc_3", "Strength Training",
                      "A full-body circuit workout.", 45, 30, "Fitness"),
        _demo_service("demo_svc_4", "Personal Training",
                      "One-on-one session with a certified trainer.", 60, 50, "Fitness"),
    ], rng)

    logger.info(f"Generated demo businesses for zipcode {zipcode}")
    return [
        Business(
            id="demo_biz_yoga_1",
            name="Serenity Now Yoga",
            type="Yoga Studio",
            timezone=DEFAULT_TIMEZONE,
            zipcode=zipcode,
            address="123 Wellness Way, Near you",
            pictures=[
                _picture("demo_p1", "photo-1544367567-0f2fcb009e0b", "Our serene main hall"),
                _picture("demo_p2", "photo-1575052814086-0884931a20b4", "Join our community"),
            ],
            services=yoga_services,
            is_demo=True,
        ),
        Business(
            id="demo_biz_gym_1",
            name="Momentum Fitness Club",
            type="Gym Center",
            timezone=DEFAULT_TIMEZONE,
            zipcode=zipcode,
            address="456 Power St, Near you",
            pictures=[
                _picture("demo_p3", "photo-1534438327276-14e5300c3a48", "State-of-the-art equipment"),
                _picture("demo_p4", "photo-1599058917212-d750089bc07e", "Push your limits"),
            ],
            announcements=[
                Announcement(
                    id="demo_a1",
                    message="Grand Opening Special! 20% off all memberships this month.",
                    timestamp=now,
                    is_demo=True,
                ),
            ],
            services=gym_services,
            is_demo=True,
        ),
    ]


def demo_data_for_owner(
    category: BusinessCategory,
    now: datetime,
    rng: Optional[random.Random] = None,
) -> OwnerDemoData:
    """
    Starter content for a new owner's business.

    "Yoga & Fitness Center" gets both the yoga and the fitness content.

    Args:
        category: The owner's business category.
        now: Reference instant for demo appointments and announcements.
        rng: Random source for schedule generation.
    """
    rng = rng or random.Random()
    data = OwnerDemoData()

    if "Yoga" in category:
        data.pictures += [
            _picture("demo_p_y1", "photo-1506126613408-eca07ce68773", "Morning meditation session"),
            _picture("demo_p_y2", "photo-1591291621222-2685a3a9", "Our beautiful studio space"),
        ]
        data.services += _schedule_all([
            _demo_service("demo_svc_y1", "Vinyasa Flow",
                          "A dynamic flow class linking breath to movement.", 60, 20, "Yoga"),
            _demo_service("demo_svc_y2", "Restorative Yoga",
                          "Gentle poses for deep relaxation.", 75, 25, "Yoga"),
        ], rng)
        start = now + timedelta(days=2)
        data.appointments.append(Appointment(
            id="demo_appt_y1",
            service_id="demo_svc_y1",
            service_name="Vinyasa Flow",
            customer=Customer(name="Jane Doe", email="jane@demo.com"),
            start_time=start,
            end_time=start + timedelta(minutes=60),
            status="confirmed",
            is_demo=True,
        ))

    if "Fitness" in category:
        data.pictures += [
            _picture("demo_p_g1", "photo-1571902943202-507ec2618e8f", "Fully equipped weight room"),
            _picture("demo_p_g2", "photo-1540497077202-7c8a3999166f", "Cardio zone"),
        ]
        data.announcements.append(Announcement(
            id=f"ann_demo_{int(now.timestamp())}",
            message=(
                "Welcome to your new dashboard! "
                "Don't forget to update your services and business hours."
            ),
            timestamp=now,
            is_demo=True,
        ))
        trainer = _demo_service("demo_svc_g1", "Personal Training",
                                "One-on-one session with a certified trainer.", 60, 50, "Fitness")
        schedule = generate_weekly_schedule(data.services, trainer.duration_minutes, rng)
        data.services.append(trainer.model_copy(update={"weekly_schedule": schedule}))
        start = now + timedelta(days=3)
        data.appointments.append(Appointment(
            id="demo_appt_g1",
            service_id="demo_svc_g1",
            service_name="Personal Training",
            customer=Customer(name="John Smith", email="john@demo.com"),
            start_time=start,
            end_time=start + timedelta(minutes=60),
            notes="Focus on strength.",
            status="confirmed",
            is_demo=True,
        ))

    logger.debug(
        f"Owner demo data for '{category}': {len(data.services)} service(s), "
        f"{len(data.appointments)} appointment(s)"
    )
    return data
