"""Type definitions for Apple's key set and token claims."""

import inspect
import warnings
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictBool, model_validator

APPLE_ISSUER = "https://appleid.apple.com"

FlagString = Literal["true", "false"]
# Apple sends these flags as JSON booleans or as the strings "true"/"false"
# depending on the API version. The value is kept as received; anything else
# fails validation.
Flag = FlagString | StrictBool

# RFC 7519 NumericDate: seconds since the epoch, not necessarily integral.
NumericDate = int | float


def flag_value(flag: Flag | None) -> bool | None:
    """Normalize a string-or-boolean claim flag to ``bool``."""
    if flag is None or isinstance(flag, bool):
        return flag
    return flag == "true"


class JWKEntry(BaseModel):
    """Single RSA key record from Apple's JWKS response."""

    model_config = ConfigDict(extra="allow")

    kty: str = "RSA"
    kid: str
    use: str = "sig"
    alg: str = "RS256"
    n: str
    e: str


class JWKSResponse(BaseModel):
    """JSON Web Key Set response of ``/auth/keys``."""

    keys: list[JWKEntry]


class VerifyOptions(BaseModel):
    """Token verification options; fields set by the caller override defaults."""

    model_config = ConfigDict(populate_by_name=True)

    algorithms: list[str] = Field(default_factory=lambda: ["RS256"])
    issuer: str | list[str] = APPLE_ISSUER
    audience: str | list[str] | None = None
    subject: str | None = None
    nonce: str | None = None
    leeway: float = Field(default=0, alias="clockTolerance")
    max_age: int | None = Field(default=None, alias="maxAge")
    require: list[str] = Field(default_factory=list)


class IdentityTokenClaims(BaseModel):
    """Decoded and verified claims of an Apple identity token.

    ``iss``, ``sub``, ``aud``, ``exp`` and ``iat`` are required; every other
    claim is optional and unknown claims are kept.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    iss: str
    sub: str
    aud: str | list[str]
    exp: NumericDate
    iat: NumericDate
    nonce: str | None = None
    nonce_supported: bool | None = None
    email: str | None = None
    email_verified: Flag | None = None
    is_private_email: Flag | None = None
    auth_time: int | None = None
    real_user_status: int | None = None


class WebhookEventType(StrEnum):
    """Account lifecycle events delivered by server-to-server notifications."""

    EMAIL_DISABLED = "email-disabled"
    EMAIL_ENABLED = "email-enabled"
    CONSENT_REVOKED = "consent-revoked"
    ACCOUNT_DELETE = "account-delete"


class WebhookEvent(BaseModel):
    """The ``events`` claim of a webhook token, once deserialized."""

    model_config = ConfigDict(extra="allow", frozen=True)

    type: WebhookEventType
    sub: str
    event_time: int
    # Only present on email-disabled and email-enabled events.
    email: str | None = None
    is_private_email: Flag | None = None


class WebhookTokenClaims(BaseModel):
    """Decoded and verified claims of an Apple server-to-server notification."""

    model_config = ConfigDict(extra="allow", frozen=True)

    iss: str
    aud: str | list[str]
    exp: NumericDate
    iat: NumericDate
    jti: str
    events: WebhookEvent


_INTERNAL_MODULES = ("apple_signin.", "pydantic")


def _caller_stacklevel() -> int:
    """Stack level of the first frame outside this package and pydantic.

    Counted from the function that calls ``warnings.warn``, so a warning
    raised inside a validator points at the caller of the public API.
    """
    frame = inspect.currentframe()
    caller = frame.f_back if frame is not None else None
    level = 1
    while caller is not None and caller.f_back is not None:
        module = caller.f_globals.get("__name__", "")
        if not module.startswith(_INTERNAL_MODULES):
            break
        caller = caller.f_back
        level += 1
    del frame
    return level


class ClientSecretOptions(BaseModel):
    """Inputs for minting a client secret.

    Exactly one of ``private_key`` and ``private_key_path`` must be set.
    """

    model_config = ConfigDict(populate_by_name=True)

    client_id: str = Field(default="", alias="clientID")
    team_id: str = Field(default="", alias="teamID")
    key_identifier: str = Field(default="", alias="keyIdentifier")
    private_key: str = Field(default="", alias="privateKey")
    private_key_path: str = Field(default="", alias="privateKeyPath")
    exp_after: int | None = Field(default=None, alias="expAfter")

    @model_validator(mode="before")
    @classmethod
    def normalize_legacy_team_id(cls, data: Any) -> Any:
        """Accept the deprecated ``teamId`` spelling of ``teamID``."""
        if not isinstance(data, dict) or "teamId" not in data:
            return data
        warnings.warn(
            "'teamId' is deprecated, pass 'teamID' or 'team_id' instead",
            DeprecationWarning,
            stacklevel=_caller_stacklevel(),
        )
        normalized = {k: v for k, v in data.items() if k != "teamId"}
        if not normalized.get("teamID") and not normalized.get("team_id"):
            normalized["team_id"] = data["teamId"]
        return normalized


class ClientSecretClaims(BaseModel):
    """Claims of the client assertion sent to Apple's token endpoint."""

    iss: str
    sub: str
    aud: str
    iat: int
    exp: int
