"""Server-to-server notification endpoint for account lifecycle events."""

import logging
from collections.abc import Awaitable, Callable

import httpx
import jwt
from fastapi import APIRouter
from starlette.responses import JSONResponse

from apple_signin.api.schemas import NotificationPayload
from apple_signin.core.client import AppleAuthClient
from apple_signin.crypto.types import VerifyOptions, WebhookTokenClaims

logger = logging.getLogger(__name__)

HTTP_BAD_REQUEST = 400
HTTP_SERVICE_UNAVAILABLE = 503
NOTIFICATIONS_PATH = "/apple/notifications"

NotificationHandler = Callable[[WebhookTokenClaims], Awaitable[None]]


def create_notifications_router(
    client: AppleAuthClient,
    handler: NotificationHandler,
    path: str = NOTIFICATIONS_PATH,
) -> APIRouter:
    """Build a router that verifies notifications and passes them to ``handler``.

    The token audience is checked against the client id in the client's
    settings when one is configured.
    """
    router = APIRouter()
    audience = client.settings.client_id or None

    @router.post(path, response_model=None)
    async def receive_notification(body: NotificationPayload) -> JSONResponse:
        """POST -- verify an Apple webhook token and dispatch its event."""
        try:
            claims = await client.verify_webhook_token(
                body.payload, VerifyOptions(audience=audience)
            )
        except jwt.PyJWTError as exc:
            logger.warning("Rejected Apple notification: %s", exc)
            return JSONResponse(
                {"error": "invalid_token"}, status_code=HTTP_BAD_REQUEST
            )
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Apple keys unavailable for notification: %s", exc)
            return JSONResponse(
                {"error": "temporarily_unavailable"},
                status_code=HTTP_SERVICE_UNAVAILABLE,
            )

        await handler(claims)
        return JSONResponse({}, status_code=200)

    return router
