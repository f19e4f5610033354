"""Library settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict

APPLE_ENDPOINT_URL = "https://appleid.apple.com"
CLIENT_SECRET_TTL_DEFAULT = 300


class AppleSettings(BaseSettings):
    """Sign in with Apple client settings."""

    model_config = SettingsConfigDict(env_prefix="APPLE_")

    endpoint_url: str = APPLE_ENDPOINT_URL
    client_id: str = ""
    team_id: str = ""
    key_identifier: str = ""
    private_key: str = ""
    private_key_path: str = ""
    redirect_uri: str = ""
    client_secret_ttl: int = CLIENT_SECRET_TTL_DEFAULT

    @property
    def base_url(self) -> str:
        """Endpoint URL without a trailing slash."""
        return self.endpoint_url.rstrip("/")
