"""Client secret (ES256 client assertion) creation."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import jwt

from apple_signin.core.errors import InvalidOptionsError
from apple_signin.core.settings import APPLE_ENDPOINT_URL, CLIENT_SECRET_TTL_DEFAULT
from apple_signin.crypto.types import ClientSecretClaims, ClientSecretOptions

CLIENT_SECRET_ALGORITHM = "ES256"


def _validate(options: ClientSecretOptions) -> None:
    """Raise ``InvalidOptionsError`` for missing or conflicting inputs."""
    if not options.client_id:
        raise InvalidOptionsError("clientID is empty")
    if not options.team_id:
        raise InvalidOptionsError("teamID is empty")
    if not options.key_identifier:
        raise InvalidOptionsError("keyIdentifier is empty")
    if not options.private_key and not options.private_key_path:
        raise InvalidOptionsError("privateKey and privateKeyPath are empty")
    if options.private_key and options.private_key_path:
        raise InvalidOptionsError(
            "privateKey and privateKeyPath cannot be passed together, "
            "choose one of them"
        )
    if options.private_key_path and not Path(options.private_key_path).is_file():
        raise InvalidOptionsError("Can't find private key")


def build_client_secret_claims(
    options: ClientSecretOptions, endpoint_url: str = APPLE_ENDPOINT_URL
) -> ClientSecretClaims:
    """Build the claims of a fresh client secret."""
    now = datetime.now(UTC)
    ttl = options.exp_after or CLIENT_SECRET_TTL_DEFAULT
    return ClientSecretClaims(
        iss=options.team_id,
        sub=options.client_id,
        aud=endpoint_url,
        iat=int(now.timestamp()),
        exp=int((now + timedelta(seconds=ttl)).timestamp()),
    )


def get_client_secret(
    options: ClientSecretOptions, endpoint_url: str = APPLE_ENDPOINT_URL
) -> str:
    """Sign a client secret with the caller's private key.

    Options are validated before the key file is read or anything is signed.
    """
    _validate(options)
    if options.private_key_path:
        key = Path(options.private_key_path).read_text()
    else:
        key = options.private_key
    claims = build_client_secret_claims(options, endpoint_url)
    return jwt.encode(
        claims.model_dump(),
        key,
        algorithm=CLIENT_SECRET_ALGORITHM,
        headers={"kid": options.key_identifier},
    )
