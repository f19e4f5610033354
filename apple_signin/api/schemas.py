"""Request bodies of the Apple-facing HTTP routes."""

from pydantic import BaseModel


class NotificationPayload(BaseModel):
    """Body Apple POSTs to a server-to-server notification endpoint."""

    payload: str
