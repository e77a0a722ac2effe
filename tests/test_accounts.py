"""Tests for the account service.

These tests validate:
- Customer and owner signup, including the linked business for owners
- Descriptive rejection of duplicate emails, missing fields and mismatched passwords
- Login by email and role, session slot handling
- Demo tenants for customers in empty zipcodes
- Profile updates and password reset
"""

import pytest

from core.contracts.studio import CustomerUser, OwnerUser
from pipelines.studio_assistant.accounts import AccountService, hash_password
from pipelines.studio_assistant.config import BUSINESSES_KEY, SESSION_USER_KEY, USERS_KEY
from pipelines.studio_assistant.errors import AccountError
from fixtures.sample_studio import customer_signup_form, owner_signup_form


@pytest.fixture
def accounts(store, directory):
    return AccountService(store, directory)


@pytest.fixture
def customer(accounts):
    return accounts.signup("user", customer_signup_form())


@pytest.fixture
def owner(accounts):
    return accounts.signup("business_owner", owner_signup_form())


# =============================================================================
# SIGNUP
# =============================================================================

class TestSignup:

    def test_customer_signup(self, accounts, store, customer):
        assert isinstance(customer, CustomerUser)
        assert customer.profile.full_name == "Jane Doe"
        assert customer.password_hash == hash_password("s3cret!")
        assert store.get(SESSION_USER_KEY) == customer.id
        assert [u["email"] for u in store.get(USERS_KEY)] == ["jane@example.com"]

    def test_password_never_stored_in_clear(self, store, customer):
        assert "s3cret!" not in str(store.get(USERS_KEY))

    def test_owner_signup_creates_business(self, accounts, directory, owner, now):
        assert isinstance(owner, OwnerUser)
        business = directory.get_business(owner.business_id)

        assert business.name == "Iron Temple"
        assert business.type == "Gym Center"
        assert business.timezone == "America/New_York"
        assert [s.name for s in business.services] == ["Personal Training"]
        assert [a.id for a in business.appointments] == ["demo_appt_g1"]
        assert business.announcements[0].message.startswith("Welcome to your new dashboard!")
        assert [p.id for p in owner.profile.pictures] == ["demo_p_g1", "demo_p_g2"]

    def test_duplicate_email_rejected(self, accounts, customer, store):
        with pytest.raises(AccountError, match="already exists"):
            accounts.signup("business_owner", owner_signup_form(email="JANE@example.com"))
        assert len(store.get(USERS_KEY)) == 1

    def test_missing_fields_are_named(self, accounts, store):
        form = customer_signup_form(last_name="", zipcode=None)
        with pytest.raises(AccountError) as exc_info:
            accounts.signup("user", form)
        assert str(exc_info.value) == "Missing mandatory fields: last_name, zipcode"
        assert store.get(USERS_KEY) is None

    def test_password_mismatch(self, accounts):
        with pytest.raises(AccountError, match="Passwords do not match."):
            accounts.signup("user", customer_signup_form(confirm_password="other"))

    def test_invalid_email(self, accounts):
        with pytest.raises(AccountError, match="email"):
            accounts.signup("user", customer_signup_form(email="not-an-email"))

    def test_unknown_owner_category(self, accounts, store):
        with pytest.raises(AccountError, match="Unknown category"):
            accounts.signup("business_owner", owner_signup_form(category="Pilates"))
        assert store.get(BUSINESSES_KEY) is None

    def test_unknown_role(self, accounts):
        with pytest.raises(AccountError):
            accounts.signup("admin", customer_signup_form())


# =============================================================================
# LOGIN / SESSION
# =============================================================================

class TestLogin:

    def test_login_sets_session(self, accounts, customer, store):
        accounts.logout()
        assert accounts.current_user() is None

        user = accounts.login("Jane@Example.com", "s3cret!", "user")

        assert user.id == customer.id
        assert store.get(SESSION_USER_KEY) == customer.id
        assert accounts.current_user().id == customer.id

    def test_wrong_role_is_not_found(self, accounts, customer):
        with pytest.raises(AccountError, match="User not found. Please check your email and role."):
            accounts.login("jane@example.com", "s3cret!", "business_owner")

    def test_wrong_password(self, accounts, customer):
        with pytest.raises(AccountError, match="Invalid password."):
            accounts.login("jane@example.com", "wrong", "user")


# =============================================================================
# VISIBLE BUSINESSES
# =============================================================================

class TestVisibleBusinesses:

    def test_customer_sees_demo_tenants_in_empty_zipcode(self, accounts, customer, store):
        businesses = accounts.visible_businesses(customer)

        assert [b.id for b in businesses] == ["demo_biz_yoga_1", "demo_biz_gym_1"]
        assert all(b.is_demo and b.zipcode == "10001" for b in businesses)
        assert store.get(BUSINESSES_KEY) is None

    def test_customer_sees_real_nearby_businesses(self, accounts, customer, stored_business):
        assert [b.id for b in accounts.visible_businesses(customer)] == ["biz_yoga_1"]

    def test_other_zipcodes_are_hidden(self, accounts, directory, customer, yoga_business):
        directory.add_business(yoga_business.model_copy(update={"id": "far", "zipcode": "94105"}))
        assert all(b.is_demo for b in accounts.visible_businesses(customer))

    def test_owner_and_anonymous_see_everything(self, accounts, owner, stored_business):
        assert len(accounts.visible_businesses(owner)) == 2
        assert len(accounts.visible_businesses(None)) == 2


# =============================================================================
# PROFILE
# =============================================================================

class TestProfile:

    def test_update_customer_profile(self, accounts, customer):
        updated = accounts.update_customer_profile(
            customer.id, {"address": "2 Side St", "apartment_number": "4B", "email": "x@example.com"}
        )

        assert updated.profile.address == "2 Side St"
        assert updated.profile.apartment_number == "4B"
        assert updated.email == "jane@example.com"
        assert accounts.get_user(customer.id).profile.address == "2 Side St"

    def test_owner_profile_update_rejected(self, accounts, owner):
        with pytest.raises(AccountError, match="Customer not found."):
            accounts.update_customer_profile(owner.id, {"address": "x"})

    def test_reset_password(self, accounts, customer):
        accounts.reset_password(customer.id, "s3cret!", "n3w-pass")
        accounts.login("jane@example.com", "n3w-pass", "user")

    def test_reset_password_wrong_old(self, accounts, customer):
        with pytest.raises(AccountError, match="Incorrect old password."):
            accounts.reset_password(customer.id, "nope", "n3w-pass")

    def test_reset_password_unknown_user(self, accounts):
        with pytest.raises(AccountError, match="User not found."):
            accounts.reset_password("user_missing", "a", "b")
