"""RSA public key construction from JWK components."""

import base64

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicNumbers

from apple_signin.crypto.types import JWKEntry


def _base64url_to_int(value: str) -> int:
    """Decode a base64 or base64url string (padding optional) to an integer."""
    normalized = value.replace("+", "-").replace("/", "_")
    padded = normalized + "=" * (-len(normalized) % 4)
    raw = base64.urlsafe_b64decode(padded)
    return int.from_bytes(raw, byteorder="big")


def jwk_entry_to_pem(entry: JWKEntry) -> str:
    """Convert an RSA JWK (modulus and exponent) to a PEM public key."""
    numbers = RSAPublicNumbers(
        e=_base64url_to_int(entry.e),
        n=_base64url_to_int(entry.n),
    )
    return (
        numbers.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode()
    )
