"""
Access token handling.

The identity provider signs HS256 tokens with the shared secret; this
service only verifies them. Browsers send the token in the httpOnly
access_token cookie, API clients in an Authorization: Bearer header.
create_access_token exists for scripts and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from commissiondesk.config import settings

ALGORITHM = "HS256"
TOKEN_TYPE = "access"
COOKIE_NAME = "access_token"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a token for a profile id and role (member / manager / admin)."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(hours=settings.jwt_expire_hours)

    claims = {
        "sub": str(user_id),
        "role": role,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[TokenClaims]:
    """
    Decode and check a token.

    Returns None for a bad signature, an expired token, a non-access token
    or missing claims.
    """
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return None

    if claims.get("type") != TOKEN_TYPE or not claims.get("role"):
        return None

    try:
        user_id = int(claims.get("sub"))
    except (TypeError, ValueError):
        return None

    return TokenClaims(user_id=user_id, role=claims["role"])


def get_token_from_request(request) -> Optional[str]:
    """Token from the cookie, else from a Bearer header."""
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token

    scheme, _, credentials = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    return None
