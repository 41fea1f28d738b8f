"""Identity token verification.

Tokens are issued by the external identity provider; this service only
checks them and reads the subject.
"""

from typing import Any

from jose import JWTError, jwt

from app.config import settings
from app.core.exceptions import AuthenticationError


def verify_identity_token(token: str) -> dict[str, Any]:
    """Verify and decode an identity token."""
    options = {"verify_aud": settings.identity_token_audience is not None}
    try:
        return jwt.decode(
            token,
            settings.identity_token_secret,
            algorithms=[settings.identity_token_algorithm],
            audience=settings.identity_token_audience,
            options=options,
        )
    except JWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")


def token_subject(token: str) -> str:
    """Return the external user id (``sub``) carried by a valid token."""
    payload = verify_identity_token(token)
    subject = payload.get("sub")
    if not subject:
        raise AuthenticationError("Invalid token payload")
    return subject
