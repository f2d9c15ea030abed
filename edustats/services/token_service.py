"""Bearer token verification (ES256 JWT).

Tokens are issued by the platform's login service; this service only
verifies them.  The verifying key comes from JWT_PUBLIC_KEY (PEM).
Without it, an ephemeral key pair is generated at import so local runs
and tests can mint their own tokens with create_access_token().

Claims: sub (user id), role (admin|teacher|student), iss, aud, exp,
iat, jti.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime, timedelta

import jwt
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from edustats.core.config import SETTINGS

ALGORITHM = "ES256"
ISSUER = "edu-platform"
AUDIENCE = "edustats"
ACCESS_TOKEN_TTL_MIN = 60 * 24 * 7  # login service issues week-long tokens

if SETTINGS.jwt_public_key:
    _private_key: ec.EllipticCurvePrivateKey | None = None
    _public_key = serialization.load_pem_public_key(
        SETTINGS.jwt_public_key.encode("utf-8")
    )
else:
    _private_key = ec.generate_private_key(ec.SECP256R1())
    _public_key = _private_key.public_key()


def create_access_token(
    *,
    sub: str,
    role: str,
    ttl: timedelta = timedelta(minutes=ACCESS_TOKEN_TTL_MIN),
) -> str:
    """Sign a token with the local dev key.

    Only available when no JWT_PUBLIC_KEY is configured.
    """
    if _private_key is None:
        raise RuntimeError("token signing is disabled when JWT_PUBLIC_KEY is set")
    now = datetime.now(UTC)
    payload = {
        "sub": sub,
        "role": role,
        "iss": ISSUER,
        "aud": AUDIENCE,
        "exp": now + ttl,
        "iat": now,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(payload, _private_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and claims, return the payload.

    The algorithm is pinned, so alg=none and HS/ES confusion are rejected.
    Raises jwt.ExpiredSignatureError or jwt.InvalidTokenError.
    """
    return jwt.decode(
        token,
        _public_key,  # type: ignore[arg-type]
        algorithms=[ALGORITHM],
        issuer=ISSUER,
        audience=AUDIENCE,
        options={"require": ["sub", "exp", "iat"]},
    )
