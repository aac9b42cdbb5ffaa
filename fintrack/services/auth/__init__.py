"""Authentication services."""

from fintrack.services.auth.interface import (
    AuthResult,
    AuthService,
    UserRecord,
    UserStore,
)
from fintrack.services.auth.password import (
    PasswordAuthService,
    hash_password,
    verify_password,
)
from fintrack.services.auth.stores import (
    GoogleSheetsUserStore,
    InMemoryUserStore,
)

__all__ = [
    "AuthResult",
    "AuthService",
    "UserRecord",
    "UserStore",
    "PasswordAuthService",
    "hash_password",
    "verify_password",
    "GoogleSheetsUserStore",
    "InMemoryUserStore",
]
