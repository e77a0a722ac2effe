"""
Account service: signup, login, session identity and profile changes.

Users live under the ``Users`` key of the state store and the logged-in
user's id under ``session:user_id``. Password hashing here is a
placeholder digest, not a credential-storage design.
"""

import hashlib
import random
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError

from core.contracts.studio import (
    CATEGORY_TO_TYPE,
    Business,
    BusinessProfile,
    CustomerProfile,
    CustomerUser,
    OwnerUser,
    Role,
    user_adapter,
)
from core.infrastructure.state_store import StateStore
from core.logger import get_logger
from pipelines.studio_assistant.config import DEFAULT_TIMEZONE, SESSION_USER_KEY, USERS_KEY
from pipelines.studio_assistant.demo_data import demo_businesses_for_zipcode, demo_data_for_owner
from pipelines.studio_assistant.directory import BusinessDirectory, Clock, new_id
from pipelines.studio_assistant.errors import AccountError

logger = get_logger(__name__)

AnyUser = Union[CustomerUser, OwnerUser]

CUSTOMER_REQUIRED_FIELDS = (
    "first_name", "last_name", "email", "address", "zipcode", "password", "confirm_password",
)
OWNER_REQUIRED_FIELDS = (
    "business_name", "address", "zipcode", "email", "password", "category",
)
CUSTOMER_PROFILE_FIELDS = ("first_name", "last_name", "address", "zipcode", "apartment_number")


def hash_password(password: str) -> str:
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


class AccountService:
    """
    Customer and owner accounts.

    Usage:
        accounts = AccountService(store, BusinessDirectory(store))
        owner = accounts.signup("business_owner", {...})
        accounts.visible_businesses(owner)
    """

    def __init__(
        self,
        store: StateStore,
        directory: BusinessDirectory,
        clock: Optional[Clock] = None,
        demo_rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.directory = directory
        self.clock = clock or directory.clock
        self.demo_rng = demo_rng or directory.schedule_rng

    # =========================================================================
    # USER COLLECTION
    # =========================================================================

    def list_users(self) -> List[AnyUser]:
        return [user_adapter.validate_python(item) for item in self.store.get(USERS_KEY, [])]

    def _save_users(self, users: List[AnyUser]) -> None:
        self.store.set(USERS_KEY, [u.model_dump(mode="json") for u in users])

    def get_user(self, user_id: str) -> Optional[AnyUser]:
        for user in self.list_users():
            if user.id == user_id:
                return user
        return None

    def _replace_user(self, updated: AnyUser) -> None:
        self._save_users([updated if u.id == updated.id else u for u in self.list_users()])

    # =========================================================================
    # SIGNUP / LOGIN
    # =========================================================================

    def signup(self, role: Role, data: Dict[str, Any]) -> AnyUser:
        """
        Register a customer or an owner and start their session.

        Owner signup also creates the linked business, seeded with demo
        content.

        Args:
            role: "user" or "business_owner".
            data: Form fields.

        Returns:
            The new user.

        Raises:
            AccountError: Duplicate email, missing fields, mismatched
                passwords or malformed values.
        """
        email = (data.get("email") or "").strip()
        if email and any(u.email.lower() == email.lower() for u in self.list_users()):
            raise AccountError("An account with this email already exists.")

        if role == "user":
            user = self._build_customer(data)
        elif role == "business_owner":
            user = self._build_owner(data)
        else:
            raise AccountError(f"Unknown role: {role!r}")

        self.store.append(USERS_KEY, user.model_dump(mode="json"))
        self.store.set(SESSION_USER_KEY, user.id)
        logger.info(f"Signed up {role} {user.id}")
        return user

    def _build_customer(self, data: Dict[str, Any]) -> CustomerUser:
        _require_fields(data, CUSTOMER_REQUIRED_FIELDS)
        if data["password"] != data["confirm_password"]:
            raise AccountError("Passwords do not match.")
        try:
            return CustomerUser(
                id=new_id("user"),
                email=data["email"].strip(),
                password_hash=hash_password(data["password"]),
                profile=CustomerProfile(
                    **{key: data[key] for key in CUSTOMER_PROFILE_FIELDS if data.get(key)}
                ),
            )
        except ValidationError as e:
            raise AccountError(f"Invalid signup data: {_first_error(e)}") from e

    def _build_owner(self, data: Dict[str, Any]) -> OwnerUser:
        _require_fields(data, OWNER_REQUIRED_FIELDS)
        if data.get("confirm_password") and data["password"] != data["confirm_password"]:
            raise AccountError("Passwords do not match.")
        category = data["category"]
        if category not in CATEGORY_TO_TYPE:
            raise AccountError(
                f"Unknown category {category!r}; expected one of {', '.join(CATEGORY_TO_TYPE)}"
            )

        demo = demo_data_for_owner(category, self.clock(), self.demo_rng)
        business_id = new_id("biz")
        try:
            profile = BusinessProfile(
                business_name=data["business_name"],
                address=data["address"],
                zipcode=data["zipcode"],
                category=category,
                pictures=demo.pictures,
                announcements=demo.announcements,
            )
            owner = OwnerUser(
                id=new_id("user"),
                email=data["email"].strip(),
                password_hash=hash_password(data["password"]),
                profile=profile,
                business_id=business_id,
            )
        except ValidationError as e:
            raise AccountError(f"Invalid signup data: {_first_error(e)}") from e

        self.directory.add_business(Business(
            id=business_id,
            name=profile.business_name,
            type=CATEGORY_TO_TYPE[category],
            timezone=DEFAULT_TIMEZONE,
            zipcode=profile.zipcode,
            address=profile.address,
            pictures=demo.pictures,
            announcements=demo.announcements,
            services=demo.services,
            appointments=demo.appointments,
        ))
        return owner

    def login(self, email: str, password: str, role: Role) -> AnyUser:
        """
        Raises:
            AccountError: Unknown email/role pair or wrong password.
        """
        wanted = email.strip().lower()
        for user in self.list_users():
            if user.email.lower() == wanted and user.role == role:
                break
        else:
            raise AccountError("User not found. Please check your email and role.")
        if user.password_hash != hash_password(password):
            raise AccountError("Invalid password.")
        self.store.set(SESSION_USER_KEY, user.id)
        logger.info(f"User {user.id} logged in")
        return user

    def logout(self) -> None:
        self.store.delete(SESSION_USER_KEY)

    def current_user(self) -> Optional[AnyUser]:
        user_id = self.store.get(SESSION_USER_KEY)
        return self.get_user(user_id) if user_id else None

    def visible_businesses(self, user: Optional[AnyUser], now: Optional[datetime] = None) -> List[Business]:
        """
        Businesses a user can browse.

        A customer in a zipcode without real businesses sees demo tenants.
        Demo tenants are built fresh and never stored.
        """
        real = self.directory.list_businesses()
        if isinstance(user, CustomerUser):
            nearby = [b for b in real if b.zipcode == user.profile.zipcode]
            if not nearby:
                logger.info(f"No businesses in {user.profile.zipcode}; showing demo businesses")
                return demo_businesses_for_zipcode(
                    user.profile.zipcode, self.demo_rng, now or self.clock()
                )
            return nearby
        return real

    # =========================================================================
    # PROFILE
    # =========================================================================

    def update_customer_profile(self, user_id: str, changes: Dict[str, Any]) -> CustomerUser:
        """
        Merge profile changes into a customer's profile.

        Raises:
            AccountError: Unknown user, owner account, or invalid values.
        """
        user = self.get_user(user_id)
        if not isinstance(user, CustomerUser):
            raise AccountError("Customer not found.")
        allowed = {k: v for k, v in changes.items() if k in CUSTOMER_PROFILE_FIELDS}
        try:
            profile = CustomerProfile(**{**user.profile.model_dump(), **allowed})
        except ValidationError as e:
            raise AccountError(f"Invalid profile data: {_first_error(e)}") from e
        updated = user.model_copy(update={"profile": profile})
        self._replace_user(updated)
        logger.info(f"Updated profile of {user_id}: {sorted(allowed)}")
        return updated

    def reset_password(self, user_id: str, old_password: str, new_password: str) -> None:
        """
        Raises:
            AccountError: Unknown user or wrong old password.
        """
        user = self.get_user(user_id)
        if user is None:
            raise AccountError("User not found.")
        if user.password_hash != hash_password(old_password):
            raise AccountError("Incorrect old password.")
        if not new_password:
            raise AccountError("New password must not be empty.")
        self._replace_user(user.model_copy(update={"password_hash": hash_password(new_password)}))
        logger.info(f"Password reset for {user_id}")


def _require_fields(data: Dict[str, Any], required: tuple) -> None:
    missing = [name for name in required if not data.get(name)]
    if missing:
        raise AccountError(f"Missing mandatory fields: {', '.join(missing)}")


def _first_error(e: ValidationError) -> str:
    error = e.errors(include_url=False)[0]
    location = ".".join(str(part) for part in error["loc"])
    return f"{location}: {error['msg']}"
