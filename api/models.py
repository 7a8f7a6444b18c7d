"""
API request and response models for the credential endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the CredentialRecord dataclass in auth/models.py,
which owns the internal representation. user_body() maps between the two.

Wire names follow the established client contract, not Python style:
  _id      -- identity reference
  password -- the stored bcrypt hash (omitted when EXPOSE_PASSWORD_HASH=false)
  userId   -- identity reference, repeated at the top of the login body
Models declare these as aliases; serialize with model_dump(by_alias=True).
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.models import CredentialRecord
from auth.passwords import MAX_PASSWORD_BYTES

# Non-empty after stripping surrounding whitespace.
_Stripped = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class LoginRequest(BaseModel):
    """Request body for POST /login.

    No length or emptiness constraints: any string pair is a login attempt and
    is answered 200 or 400. Only a missing or non-string field is a 422.
    """

    email: str
    password: str


class SignupRequest(BaseModel):
    """Request body for POST /signup.

    name and email are stripped; the password is kept verbatim because
    whitespace in it is significant.
    """

    name: _Stripped = Field(max_length=255)
    email: _Stripped = Field(max_length=320)
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return value


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserBody(BaseModel):
    """A credential record as returned to clients."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(alias="_id")
    name: str
    email: str
    password: Optional[str] = None


class LoginResponse(BaseModel):
    """200 body for POST /login. The token is also sent in the authorization header."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str
    user: UserBody
    user_id: str = Field(alias="userId")


class InvalidCredentialsResponse(BaseModel):
    """400 body for POST /login. Same message for unknown email and wrong password."""

    model_config = ConfigDict(frozen=True)

    msg: str = "Invalid credentials"


class ErrorResponse(BaseModel):
    """Error envelope for 401/422/500 responses."""

    model_config = ConfigDict(frozen=True)

    error: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]


# ---------------------------------------------------------------------------
# Mapping
# ---------------------------------------------------------------------------


def user_body(record: CredentialRecord, expose_password_hash: bool) -> UserBody:
    """Map a stored record to its wire model, dropping the hash unless exposed."""
    return UserBody(
        id=record.id,
        name=record.name,
        email=record.email,
        password=record.password_hash if expose_password_hash else None,
    )
