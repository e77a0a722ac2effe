"""
Fixtures package for studio assistant testing.

Provides reusable sample data and assistant replies.
"""

from fixtures.sample_studio import (
    booking_reply,
    broadcast_reply,
    create_service_reply,
    customer_signup_form,
    demo_seed_reply,
    owner_signup_form,
    sample_business_data,
)

__all__ = [
    "booking_reply",
    "broadcast_reply",
    "create_service_reply",
    "customer_signup_form",
    "demo_seed_reply",
    "owner_signup_form",
    "sample_business_data",
]
