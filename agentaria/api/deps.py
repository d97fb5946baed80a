# agentaria/api/deps.py
"""
Shared FastAPI dependencies.

Identity comes from the auth provider's access token, sent as
``Authorization: Bearer <jwt>``.  The token's ``sub`` claim is the
subscriber id; ``email`` is used as a fallback display number.
"""

import logging

from fastapi import Header, Request
from jose import JWTError, jwt

from agentaria.config.settings import settings
from agentaria.domain.models.onboarding import Identity

logger = logging.getLogger("api.deps")


def is_browser_request(request: Request) -> bool:
    """Return True if the caller looks like a web browser."""
    accept = request.headers.get("accept", "")
    return "text/html" in accept


class BearerTokenIdentityProvider:
    """Resolves the current user from a Bearer JWT; ``None`` when unauthenticated."""

    def __init__(
        self,
        authorization: str | None,
        *,
        secret: str | None = None,
        algorithm: str | None = None,
        audience: str | None = None,
    ):
        self._authorization = authorization
        self._secret = settings.AUTH_JWT_SECRET if secret is None else secret
        self._algorithm = algorithm or settings.AUTH_JWT_ALGORITHM
        self._audience = settings.AUTH_JWT_AUDIENCE if audience is None else audience

    async def get_current_identity(self) -> Identity | None:
        if not self._authorization or not self._authorization.startswith("Bearer "):
            return None
        if not self._secret:
            logger.error("AUTH_JWT_SECRET is not configured, rejecting token")
            return None

        token = self._authorization[7:]  # strip "Bearer "

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience or None,
                options={"verify_aud": bool(self._audience)},
            )
        except JWTError as exc:
            logger.debug("JWT decode failed: %s", exc)
            return None

        user_id = payload.get("sub")
        if not user_id:
            logger.debug("JWT missing subject")
            return None

        return Identity(user_id=str(user_id), email=payload.get("email"))


async def get_identity_provider(
    authorization: str | None = Header(None),
) -> BearerTokenIdentityProvider:
    return BearerTokenIdentityProvider(authorization)
