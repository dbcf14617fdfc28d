"""
Auth component - Registration, login and user profiles.

Handles password credentials, bearer token issuance and verification,
and avatar replacement.
"""

from .component import (
    run_get_user,
    run_login,
    run_register,
    run_update_avatar,
    run_verify_token,
)
from .models import (
    AuthOutput,
    GetUserInput,
    LoginInput,
    RegisterInput,
    UpdateAvatarInput,
    UserOutput,
    VerifyTokenInput,
)
from .ports import AuthAdapterPort, ImageStorePort, TimePort, UserRepoPort

__all__ = [
    # Entry points
    "run_get_user",
    "run_login",
    "run_register",
    "run_update_avatar",
    "run_verify_token",
    # Models
    "AuthOutput",
    "GetUserInput",
    "LoginInput",
    "RegisterInput",
    "UpdateAvatarInput",
    "UserOutput",
    "VerifyTokenInput",
    # Ports
    "AuthAdapterPort",
    "ImageStorePort",
    "TimePort",
    "UserRepoPort",
]
