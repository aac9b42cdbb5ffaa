"""
Password Authentication Service

Email + password accounts with bcrypt hashes. The signed-in user is
remembered in the local cache under the `fintrack_user` key, so a
restart resumes the session without a round trip.
"""

from typing import Optional

import bcrypt
from pydantic import ValidationError

from fintrack.audit import AuditLogger
from fintrack.models.entities import User, new_id
from fintrack.services.auth.interface import (
    AuthResult,
    AuthService,
    UserRecord,
    UserStore,
)
from fintrack.services.cache import USER_KEY, LocalCache
from fintrack.services.storage.interface import DuplicateError, StorageError


INVALID_CREDENTIALS = "Invalid email or password"
EMAIL_TAKEN = "Email already registered"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash
        return False


class PasswordAuthService(AuthService):
    """AuthService over a UserStore, with the session kept in a LocalCache."""

    def __init__(
        self,
        users: UserStore,
        cache: LocalCache,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._users = users
        self._cache = cache
        self._audit_logger = audit_logger or AuditLogger()

    def get_current_user(self) -> Optional[User]:
        raw = self._cache.get_json(USER_KEY)
        if raw is None:
            return None
        try:
            return User.model_validate(raw)
        except ValidationError as e:
            self._audit_logger.log_cache_corrupted(USER_KEY, str(e))
            return None

    def _save_current_user(self, user: User) -> None:
        self._cache.set_json(USER_KEY, user.model_dump(mode="json"))

    async def login(self, email: str, password: str) -> AuthResult:
        try:
            record = await self._users.find_by_email(normalize_email(email))
        except StorageError as e:
            self._audit_logger.log_external_service_error(
                service="user_store",
                operation="find_by_email",
                error_message=str(e),
            )
            return AuthResult.failure(f"Could not reach the user store: {e}")

        if record is None or not verify_password(password, record.password_hash):
            return AuthResult.failure(INVALID_CREDENTIALS)

        user = record.to_user()
        self._save_current_user(user)
        self._audit_logger.log_user_logged_in(user.id)
        return AuthResult.success(user)

    async def register(self, email: str, password: str) -> AuthResult:
        email = normalize_email(email)
        try:
            if await self._users.find_by_email(email) is not None:
                return AuthResult.failure(EMAIL_TAKEN)

            record = await self._users.insert(UserRecord(
                id=new_id(),
                email=email,
                password_hash=hash_password(password),
            ))
        except DuplicateError:
            return AuthResult.failure(EMAIL_TAKEN)
        except StorageError as e:
            self._audit_logger.log_external_service_error(
                service="user_store",
                operation="register",
                error_message=str(e),
            )
            return AuthResult.failure(f"Could not create the account: {e}")

        self._audit_logger.log_user_registered(record.id, record.email)
        return AuthResult.success(record.to_user())

    async def logout(self) -> None:
        user = self.get_current_user()
        self._cache.remove(USER_KEY)
        self._audit_logger.log_user_logged_out(user.id if user else None)
