"""Verification of tokens signed with Apple's rotating keys."""

import json
import logging
import time
from typing import Any

import jwt
from jwt.types import Options
from pydantic import ValidationError

from apple_signin.core.errors import ClaimMismatchError, PayloadIntegrityError
from apple_signin.crypto.types import (
    IdentityTokenClaims,
    VerifyOptions,
    WebhookEvent,
    WebhookTokenClaims,
)
from apple_signin.keys.resolver import KeyResolver

logger = logging.getLogger(__name__)


class TokenVerifier:
    """Verifies compact JWS tokens against keys supplied by a resolver.

    The key is looked up from the token's own ``kid`` header, because Apple
    rotates keys and a caller cannot know in advance which key signed a
    given token.
    """

    def __init__(self, resolver: KeyResolver) -> None:
        self._resolver = resolver

    async def decode(
        self, token: str, options: VerifyOptions | None = None
    ) -> dict[str, Any]:
        """Verify signature and registered claims; return the raw payload."""
        opts = options or VerifyOptions()
        header = jwt.get_unverified_header(token)
        public_key = await self._resolver.resolve(header.get("kid"))

        decode_opts: Options = {}
        if opts.audience is None:
            decode_opts["verify_aud"] = False
        if opts.require:
            decode_opts["require"] = list(opts.require)
        payload = jwt.decode(
            token,
            public_key,
            algorithms=opts.algorithms,
            issuer=opts.issuer,
            audience=opts.audience,
            leeway=opts.leeway,
            options=decode_opts,
        )
        _check_expected_claims(payload, opts)
        return payload

    async def verify_id_token(
        self, id_token: str, options: VerifyOptions | None = None
    ) -> IdentityTokenClaims:
        """Verify an identity token returned by Apple after authorization."""
        payload = await self.decode(id_token, options)
        try:
            return IdentityTokenClaims.model_validate(payload)
        except ValidationError as exc:
            msg = f"Malformed identity token claims: {exc}"
            raise PayloadIntegrityError(msg) from exc

    async def verify_webhook_token(
        self, webhook_token: str, options: VerifyOptions | None = None
    ) -> WebhookTokenClaims:
        """Verify a server-to-server notification token.

        ``events`` arrives as a JSON string and is parsed only after the
        signature and claims have been verified.
        """
        payload = await self.decode(webhook_token, options)
        events = payload.get("events")
        if not isinstance(events, str):
            raise PayloadIntegrityError("Webhook token events claim is not a string")
        try:
            event = WebhookEvent.model_validate(json.loads(events))
            return WebhookTokenClaims.model_validate({**payload, "events": event})
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("Rejected webhook token %s: %s", payload.get("jti"), exc)
            msg = f"Malformed webhook token events: {exc}"
            raise PayloadIntegrityError(msg) from exc


def _check_expected_claims(payload: dict[str, Any], opts: VerifyOptions) -> None:
    """Check the claims PyJWT leaves to the caller."""
    if opts.subject is not None and payload.get("sub") != opts.subject:
        raise ClaimMismatchError("subject")
    if opts.nonce is not None and payload.get("nonce") != opts.nonce:
        raise ClaimMismatchError("nonce")
    if opts.max_age is not None:
        issued_at = payload.get("iat")
        if not isinstance(issued_at, int | float):
            raise jwt.MissingRequiredClaimError("iat")
        if time.time() - issued_at > opts.max_age + opts.leeway:
            raise jwt.ExpiredSignatureError("maxAge exceeded")
