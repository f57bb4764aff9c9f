"""
Result Models for account operations

Expected failures (bad input, lockout, unknown user) are returned, never
raised. Each failure has a stable kind the caller can switch on and a
message it can show as-is.

IMPORTANT: "unknown username" and "wrong password" share one kind
(INVALID_CREDENTIAL) so a caller can never tell which one happened.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class RegistrationError(str, Enum):
    """Why a registration was refused."""
    EMPTY_CREDENTIAL = "empty_credential"
    WEAK_PASSWORD = "weak_password"
    DUPLICATE_USERNAME = "duplicate_username"


class AuthError(str, Enum):
    """Why an authentication was refused."""
    EMPTY_CREDENTIAL = "empty_credential"
    ACCOUNT_LOCKED = "account_locked"
    INVALID_CREDENTIAL = "invalid_credential"


REGISTRATION_MESSAGES = {
    RegistrationError.EMPTY_CREDENTIAL: "Username and password cannot be empty.",
    RegistrationError.WEAK_PASSWORD: "Password must be at least {min_length} characters long.",
    RegistrationError.DUPLICATE_USERNAME: "Username already exists.",
}

AUTH_MESSAGES = {
    AuthError.EMPTY_CREDENTIAL: "Username and password cannot be empty.",
    AuthError.ACCOUNT_LOCKED: (
        "Account is temporarily locked due to multiple failed login attempts. "
        "Please try again later."
    ),
    AuthError.INVALID_CREDENTIAL: "Incorrect username and/or password.",
}


class RegistrationResult(BaseModel):
    """Outcome of AccountGuard.register."""

    success: bool
    error: Optional[RegistrationError] = None
    message: str = ""
    user_id: Optional[int] = Field(
        default=None,
        description="Id assigned to the new account"
    )

    @model_validator(mode='after')
    def validate_error_matches_success(self) -> 'RegistrationResult':
        if self.success == (self.error is not None):
            raise ValueError("A result carries an error kind if and only if it failed")
        return self

    @classmethod
    def ok(cls, user_id: Optional[int]) -> 'RegistrationResult':
        return cls(success=True, user_id=user_id, message="Registration successful.")

    @classmethod
    def fail(cls, error: RegistrationError, min_length: int = 8) -> 'RegistrationResult':
        return cls(
            success=False,
            error=error,
            message=REGISTRATION_MESSAGES[error].format(min_length=min_length),
        )


class AuthResult(BaseModel):
    """
    Outcome of AccountGuard.authenticate.

    On success user_id is the session identifier that scopes
    all subsequent record access.
    """

    success: bool
    error: Optional[AuthError] = None
    message: str = ""
    user_id: Optional[int] = None

    @model_validator(mode='after')
    def validate_error_matches_success(self) -> 'AuthResult':
        if self.success == (self.error is not None):
            raise ValueError("A result carries an error kind if and only if it failed")
        if self.success and self.user_id is None:
            raise ValueError("A successful authentication must carry a user id")
        return self

    @classmethod
    def ok(cls, user_id: int) -> 'AuthResult':
        return cls(success=True, user_id=user_id, message="Login successful.")

    @classmethod
    def fail(cls, error: AuthError) -> 'AuthResult':
        return cls(success=False, error=error, message=AUTH_MESSAGES[error])
