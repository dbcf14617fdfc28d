from dataclasses import dataclass, field
from uuid import UUID

from src.core.entities import PostError, User


@dataclass
class RegisterInput:
    username: str
    email: str
    password: str


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class VerifyTokenInput:
    token: str


@dataclass
class GetUserInput:
    user_id: UUID


@dataclass
class UpdateAvatarInput:
    user_id: UUID
    requester_id: UUID
    filename: str
    data: bytes
    content_type: str = ""


@dataclass
class AuthOutput:
    user: User | None = None
    token: str | None = None
    success: bool = False
    errors: list[PostError] = field(default_factory=list)


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    errors: list[PostError] = field(default_factory=list)
