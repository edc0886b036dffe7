# google sign-in: verifies an id token issued to this app's oauth client
# google checks signature and expiry, we check audience, issuer and email

import logging
from typing import Optional

import httpx

from app.config import settings

logger = logging.getLogger(__name__)

TOKENINFO_URL = "https://oauth2.googleapis.com/tokeninfo"
GOOGLE_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


class GoogleTokenError(Exception):
    """id token rejected or could not be checked"""


class GoogleVerifier:
    def __init__(self, client_id: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.client_id = client_id
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.client_id)

    async def verify(self, id_token: str) -> dict:
        """return the token claims, raising GoogleTokenError when they can't be trusted"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(TOKENINFO_URL, params={"id_token": id_token})
        except httpx.HTTPError as e:
            logger.error(f"Google token check failed: {e}")
            raise GoogleTokenError("Google token could not be verified") from e

        if resp.status_code != 200:
            logger.warning(f"Google rejected id token with status {resp.status_code}")
            raise GoogleTokenError("Invalid Google token")

        claims = resp.json()
        if claims.get("aud") != self.client_id:
            raise GoogleTokenError("Google token was issued to another client")
        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise GoogleTokenError("Google token has an unknown issuer")
        if str(claims.get("email_verified", "")).lower() != "true":
            raise GoogleTokenError("Google account email is not verified")
        return claims


def get_google_verifier() -> GoogleVerifier:
    return GoogleVerifier(settings.GOOGLE_CLIENT_ID)
