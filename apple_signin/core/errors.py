"""Exception types raised by the library.

Transport failures are not wrapped: ``httpx.HTTPError`` and JSON/pydantic
parse errors reach the caller unchanged. Token rejections are all
``jwt.InvalidTokenError`` subclasses, either PyJWT's own or the ones below.
"""

import jwt


class AppleSignInError(Exception):
    """Base class for errors defined by this library."""


class InvalidOptionsError(AppleSignInError, ValueError):
    """Required options are missing or conflict with each other."""


class UnknownKeyIdError(AppleSignInError, jwt.InvalidTokenError):
    """The token's key id is not in Apple's current key set."""

    def __init__(self, kid: str | None) -> None:
        super().__init__(f"Invalid id token public key id: {kid!r}")
        self.kid = kid


class ClaimMismatchError(AppleSignInError, jwt.InvalidTokenError):
    """A verified claim does not match the value the caller expected."""

    def __init__(self, claim: str) -> None:
        super().__init__(f"jwt {claim} invalid")
        self.claim = claim


class PayloadIntegrityError(AppleSignInError, jwt.InvalidTokenError):
    """A signature-verified token carries malformed claim content."""
