"""Tests for the assistant response contract and the studio domain models.

These tests validate:
- "response" is required and must be an object
- Closed enumerations reject unknown values
- UTC timestamp parsing and "...Z" serialization
- to_wire() only emits keys that were present, so validation is idempotent
- Lenient coercions (bare demo prices, non-string questions)
- The role-tagged User union
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from core.contracts.assistant import AssistantResponse, parse_assistant_response
from core.contracts.studio import (
    Business,
    CustomerUser,
    OwnerUser,
    format_utc,
    user_adapter,
)
from fixtures.sample_studio import booking_reply, demo_seed_reply, sample_business_data


# =============================================================================
# REQUIRED RESPONSE
# =============================================================================

class TestResponseRequired:

    def test_missing_response_fails(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_assistant_response({"operation": "ASSIST", "status": "success"})
        assert exc_info.value.errors()[0]["loc"] == ("response",)

    def test_null_response_fails(self):
        with pytest.raises(ValidationError):
            parse_assistant_response({"operation": "ASSIST", "response": None})

    def test_non_object_response_fails(self):
        with pytest.raises(ValidationError):
            parse_assistant_response({"response": "all good"})

    def test_empty_response_object_is_valid(self):
        """Structurally valid but empty: passes through, not an error."""
        reply = parse_assistant_response({"response": {}})
        assert reply.response.assistant_reply is None
        assert reply.operation is None
        assert reply.to_wire() == {"response": {}}

    def test_reply_only(self):
        reply = parse_assistant_response({
            "operation": "ASSIST", "role": "user", "status": "success",
            "response": {"assistant_reply": "Hello!"},
        })
        assert reply.succeeded
        assert reply.response.assistant_reply == "Hello!"


# =============================================================================
# ENUMERATIONS
# =============================================================================

class TestClosedEnums:

    @pytest.mark.parametrize("field,value", [
        ("operation", "BOOK_EVERYTHING"),
        ("status", "ok"),
        ("role", "admin"),
    ])
    def test_unknown_top_level_values_fail(self, field, value):
        with pytest.raises(ValidationError):
            parse_assistant_response({field: value, "response": {}})

    def test_unknown_appointment_status_fails(self):
        data = booking_reply()
        data["response"]["appointments"][0]["status"] = "tentative"
        with pytest.raises(ValidationError):
            parse_assistant_response(data)

    def test_unknown_notification_channel_fails(self):
        data = booking_reply()
        data["response"]["notification"]["channels"] = ["pigeon"]
        with pytest.raises(ValidationError):
            parse_assistant_response(data)

    def test_unknown_category_fails(self):
        data = booking_reply()
        data["business"]["category"] = "Pilates"
        with pytest.raises(ValidationError):
            parse_assistant_response(data)


# =============================================================================
# TIMESTAMPS AND WIRE FORM
# =============================================================================

class TestWireForm:

    def test_offsets_normalized_to_utc(self):
        data = booking_reply(start_time="2025-09-12T09:30:00-04:00", end_time="2025-09-12T10:30:00.250-04:00")
        reply = parse_assistant_response(data)

        appointment = reply.response.appointments[0]
        assert appointment.start_time == datetime(2025, 9, 12, 13, 30, tzinfo=timezone.utc)
        wire = reply.to_wire()["response"]["appointments"][0]
        assert wire["start_time"] == "2025-09-12T13:30:00Z"
        assert wire["end_time"] == "2025-09-12T14:30:00Z"

    def test_naive_timestamps_read_as_utc(self):
        reply = parse_assistant_response(booking_reply(start_time="2025-09-12T13:30:00", end_time=None))
        assert format_utc(reply.response.appointments[0].start_time) == "2025-09-12T13:30:00Z"

    def test_wire_is_idempotent(self):
        first = parse_assistant_response(booking_reply()).to_wire()
        second = parse_assistant_response(first).to_wire()
        assert first == second

    def test_wire_keeps_only_present_keys(self):
        wire = parse_assistant_response(booking_reply()).to_wire()
        assert "post" not in wire["response"]
        assert "errors" not in wire["response"]
        assert wire["response"]["appointments"][0]["notes"] is None
        assert wire["request"]["appointment"]["start_time"] == "2025-09-12T13:30:00Z"

    def test_unknown_keys_are_dropped(self):
        reply = parse_assistant_response({"response": {"assistant_reply": "x", "mood": "sunny"}, "trace": 1})
        assert reply.to_wire() == {"response": {"assistant_reply": "x"}}


# =============================================================================
# LENIENT COERCIONS
# =============================================================================

class TestCoercions:

    def test_bare_demo_price_becomes_usd_price(self):
        reply = parse_assistant_response(demo_seed_reply())
        price = reply.response.demo_services[0].price
        assert price.amount == 22
        assert price.currency == "USD"

    def test_clarifying_questions_coerced_to_strings(self):
        reply = parse_assistant_response({"response": {"clarifying_questions": ["Which day?", 3]}})
        assert reply.response.clarifying_questions == ["Which day?", "3"]

    def test_demo_photo_must_be_url(self):
        data = demo_seed_reply()
        data["response"]["demo_photos"] = ["not a url"]
        with pytest.raises(ValidationError):
            parse_assistant_response(data)

    def test_customer_email_validated(self):
        data = booking_reply(email="not-an-email")
        with pytest.raises(ValidationError):
            parse_assistant_response(data)


# =============================================================================
# DOMAIN MODELS
# =============================================================================

class TestDomainModels:

    def test_business_category_derived_from_type(self):
        business = Business.model_validate(sample_business_data())
        assert business.category == "Yoga"
        gym = business.model_copy(update={"type": "Gym Center"})
        assert gym.category == "Fitness"

    def test_service_duration_must_be_positive(self):
        data = sample_business_data()
        data["services"][0]["duration_minutes"] = 0
        with pytest.raises(ValidationError):
            Business.model_validate(data)

    def test_user_union_dispatches_on_role(self):
        owner = user_adapter.validate_python({
            "id": "u1", "email": "o@example.com", "password_hash": "h",
            "role": "business_owner", "business_id": "biz_1",
            "profile": {"business_name": "B", "address": "A", "zipcode": "1", "category": "Fitness"},
        })
        customer = user_adapter.validate_python({
            "id": "u2", "email": "c@example.com", "password_hash": "h", "role": "user",
            "profile": {"first_name": "C", "last_name": "D", "address": "A", "zipcode": "1"},
        })
        assert isinstance(owner, OwnerUser)
        assert isinstance(customer, CustomerUser)
        assert customer.profile.full_name == "C D"

    def test_user_union_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            user_adapter.validate_python({"id": "u", "email": "x@example.com", "password_hash": "h", "role": "admin"})

    def test_assistant_response_constructed_directly(self):
        reply = AssistantResponse(status="failure", response={"errors": ["boom"]})
        assert not reply.succeeded
        assert reply.to_wire() == {"status": "failure", "response": {"errors": ["boom"]}}
