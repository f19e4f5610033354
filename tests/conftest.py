"""Shared test fixtures for apple-signin."""

import base64
import json
import time
from collections.abc import Callable, Iterator
from typing import Any

import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from pydantic import BaseModel

from apple_signin.core.client import AppleAuthClient
from apple_signin.core.settings import AppleSettings
from apple_signin.core.shortcuts import reset_default_client
from apple_signin.http.transport import FetchRequest, reset_fetch

APPLE_ISSUER = "https://appleid.apple.com"
KEYS_URL = "https://appleid.apple.com/auth/keys"
TOKEN_URL = "https://appleid.apple.com/auth/token"
REVOKE_URL = "https://appleid.apple.com/auth/revoke"
CLIENT_ID = "com.example.app"

_APPLE_ENV = [
    "APPLE_ENDPOINT_URL",
    "APPLE_CLIENT_ID",
    "APPLE_TEAM_ID",
    "APPLE_KEY_IDENTIFIER",
    "APPLE_PRIVATE_KEY",
    "APPLE_PRIVATE_KEY_PATH",
    "APPLE_REDIRECT_URI",
    "APPLE_CLIENT_SECRET_TTL",
]


class RSAKeyPair(BaseModel):
    """Test RSA keypair with its JWK components."""

    kid: str
    private_key_pem: str
    public_key_pem: str
    n: str
    e: str

    def jwk(self) -> dict[str, str]:
        return {
            "kty": "RSA",
            "kid": self.kid,
            "use": "sig",
            "alg": "RS256",
            "n": self.n,
            "e": self.e,
        }


class ECKeyPair(BaseModel):
    """Test P-256 keypair, the key type Apple issues for client secrets."""

    private_key_pem: str
    public_key_pem: str


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    raw = value.to_bytes(byte_length, byteorder="big")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def generate_rsa_keypair(kid: str) -> RSAKeyPair:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    numbers = private_key.public_key().public_numbers()
    return RSAKeyPair(
        kid=kid,
        private_key_pem=private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode(),
        public_key_pem=private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode(),
        n=_int_to_base64url(numbers.n),
        e=_int_to_base64url(numbers.e),
    )


class FakeFetch:
    """Fetch function double answering by URL and recording every request."""

    def __init__(self) -> None:
        self.requests: list[FetchRequest] = []
        self._responses: dict[str, str | Exception] = {}

    def respond(self, url: str, body: str | Exception) -> None:
        self._responses[url] = body

    def respond_json(self, url: str, data: Any) -> None:
        self._responses[url] = json.dumps(data)

    def calls_to(self, url: str) -> int:
        return sum(1 for r in self.requests if r.url == url)

    async def __call__(self, request: FetchRequest) -> str:
        self.requests.append(request)
        result = self._responses.get(request.url, "")
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient APPLE_* variables out of settings under test."""
    for name in _APPLE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _reset_process_state() -> Iterator[None]:
    yield
    reset_fetch()
    reset_default_client()


@pytest.fixture(scope="session")
def rsa_keypair() -> RSAKeyPair:
    """RSA keypair published by the fake keys endpoint as ``K1``."""
    return generate_rsa_keypair("K1")


@pytest.fixture(scope="session")
def other_rsa_keypair() -> RSAKeyPair:
    return generate_rsa_keypair("K2")


@pytest.fixture(scope="session")
def ec_keypair() -> ECKeyPair:
    private_key = ec.generate_private_key(ec.SECP256R1())
    return ECKeyPair(
        private_key_pem=private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode(),
        public_key_pem=private_key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode(),
    )


@pytest.fixture
def fake_fetch(rsa_keypair: RSAKeyPair) -> FakeFetch:
    """Fetch double whose keys endpoint publishes ``rsa_keypair``."""
    fetch = FakeFetch()
    fetch.respond_json(KEYS_URL, {"keys": [rsa_keypair.jwk()]})
    return fetch


@pytest.fixture
def id_token_payload() -> dict[str, Any]:
    now = int(time.time())
    return {
        "iss": APPLE_ISSUER,
        "aud": CLIENT_ID,
        "sub": "001234.abcdef.0123",
        "iat": now,
        "exp": now + 600,
        "nonce": "n-0S6_WzA2Mj",
        "nonce_supported": True,
        "email": "abc@privaterelay.appleid.com",
        "email_verified": "true",
        "is_private_email": True,
        "auth_time": now,
    }


@pytest.fixture
def sign_token(rsa_keypair: RSAKeyPair) -> Callable[..., str]:
    """Return a signer producing RS256 tokens with the ``K1`` key by default."""

    def _sign(
        payload: dict[str, Any],
        keypair: RSAKeyPair | None = None,
        headers: dict[str, Any] | None = None,
    ) -> str:
        key = keypair or rsa_keypair
        return jwt.encode(
            payload,
            key.private_key_pem,
            algorithm="RS256",
            headers=headers if headers is not None else {"kid": key.kid},
        )

    return _sign


@pytest.fixture
def client(fake_fetch: FakeFetch) -> AppleAuthClient:
    return AppleAuthClient(AppleSettings(client_id=CLIENT_ID), fetch=fake_fetch)
