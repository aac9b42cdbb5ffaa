"""
Authentication Boundary

DESIGN DECISION: Auth is an external collaborator behind an interface.
The core only needs: who is signed in, log in, register, log out.
Credential hashing and verification are entirely the implementation's
concern.

Business failures (wrong password, duplicate email) are returned as an
AuthResult with an error message, never raised.
"""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from fintrack.models.entities import EntityModel, User


class AuthResult(BaseModel):
    """Outcome of a login or registration attempt."""
    model_config = ConfigDict(frozen=True)

    user: Optional[User] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.user is not None and self.error is None

    @classmethod
    def success(cls, user: User) -> "AuthResult":
        return cls(user=user)

    @classmethod
    def failure(cls, error: str) -> "AuthResult":
        return cls(error=error)


class UserRecord(EntityModel):
    """A registered user as stored by a UserStore."""

    id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1, max_length=254)
    password_hash: str = Field(..., min_length=1)

    def to_user(self) -> User:
        return User(id=self.id, email=self.email)


class UserStore(ABC):
    """Persistence for registered users, looked up by email."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the user with this email, or None."""
        pass

    @abstractmethod
    async def insert(self, record: UserRecord) -> UserRecord:
        """
        Store a new user.

        Raises:
            DuplicateError: If the email is already registered
            StorageError: If the insert fails
        """
        pass


class AuthService(ABC):
    """
    Abstract authentication service.

    get_current_user is synchronous: it only reads local state.
    """

    @abstractmethod
    def get_current_user(self) -> Optional[User]:
        pass

    @abstractmethod
    async def login(self, email: str, password: str) -> AuthResult:
        pass

    @abstractmethod
    async def register(self, email: str, password: str) -> AuthResult:
        pass

    @abstractmethod
    async def logout(self) -> None:
        pass
