"""
Google Calendar credentials
Encrypts crew refresh tokens at rest and exchanges them for access tokens
"""
import base64
import hashlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import httpx
from cryptography.fernet import Fernet, InvalidToken

from ..config import (
    GOOGLE_API_TIMEOUT,
    GOOGLE_CALENDAR_ENCRYPTION_KEY,
    GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET,
    GOOGLE_REDIRECT_URI,
    SECRET_KEY,
)
from ..domain.scheduling.errors import CredentialInvalidError, CredentialUnavailableError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"  # noqa: S105 - OAuth endpoint URL


def derive_fernet_key(secret: str) -> bytes:
    """Turn an arbitrary secret into a valid Fernet key (32 urlsafe-b64 bytes)"""
    return base64.urlsafe_b64encode(hashlib.sha256(secret.encode()).digest())


class TokenCipher:
    """Fernet encryption for refresh tokens stored on crew_members"""

    def __init__(self, key: Optional[str] = None):
        if key is None:
            key = GOOGLE_CALENDAR_ENCRYPTION_KEY
        raw_key = key.encode() if key else derive_fernet_key(SECRET_KEY)
        self._fernet = Fernet(raw_key)

    def encrypt(self, token: str) -> str:
        return self._fernet.encrypt(token.encode()).decode()

    def decrypt(self, encrypted_token: str) -> str:
        """Raises cryptography.fernet.InvalidToken when the value was not produced with this key"""
        return self._fernet.decrypt(encrypted_token.encode()).decode()


class GoogleCredentialService:
    """
    Resolves a usable access token from a stored (encrypted) refresh token.

    Permanent failures raise CredentialInvalidError; anything that may succeed
    on a later attempt raises CredentialUnavailableError.
    """

    def __init__(
        self,
        cipher: Optional[TokenCipher] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        redirect_uri: Optional[str] = None,
    ):
        self.cipher = cipher or TokenCipher()
        self._http_client = http_client
        self.client_id = client_id if client_id is not None else GOOGLE_CLIENT_ID
        self.client_secret = client_secret if client_secret is not None else GOOGLE_CLIENT_SECRET
        self.redirect_uri = redirect_uri or GOOGLE_REDIRECT_URI

    async def _post_token(self, data: dict) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(GOOGLE_TOKEN_URL, data=data)
        async with httpx.AsyncClient(timeout=GOOGLE_API_TIMEOUT) as client:
            return await client.post(GOOGLE_TOKEN_URL, data=data)

    async def resolve_access_token(self, stored_credential: str) -> str:
        if not stored_credential:
            raise CredentialInvalidError("No stored credential")

        try:
            refresh_token = self.cipher.decrypt(stored_credential)
        except InvalidToken as e:
            logger.error("❌ Stored Google Calendar credential could not be decrypted")
            raise CredentialInvalidError("Stored credential could not be decrypted") from e

        if not self.client_id or not self.client_secret:
            logger.error("❌ Google OAuth credentials not configured")
            raise CredentialUnavailableError("OAuth not configured")

        try:
            response = await self._post_token(
                {
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "refresh_token": refresh_token,
                    "grant_type": "refresh_token",
                }
            )
        except httpx.HTTPError as e:
            logger.error(f"❌ Token refresh request failed: {str(e)}")
            raise CredentialUnavailableError(f"Token refresh request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"❌ Token refresh failed: {response.text}")
            # invalid_grant: refresh token revoked or expired, user must reconnect
            if "invalid_grant" in response.text:
                raise CredentialInvalidError("Refresh token revoked or expired")
            raise CredentialUnavailableError(f"Token refresh failed with HTTP {response.status_code}")

        access_token = response.json().get("access_token")
        if not access_token:
            logger.error("❌ No access token in refresh response")
            raise CredentialUnavailableError("No access token in refresh response")

        logger.info("🔄 Google Calendar access token refreshed")
        return access_token

    async def exchange_code(self, code: str) -> tuple[str, datetime]:
        """
        Exchange an OAuth authorization code.
        Returns (encrypted refresh token, access token expiry)
        """
        if not self.client_id or not self.client_secret:
            raise CredentialUnavailableError("OAuth not configured")

        try:
            response = await self._post_token(
                {
                    "code": code,
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    "redirect_uri": self.redirect_uri,
                    "grant_type": "authorization_code",
                }
            )
        except httpx.HTTPError as e:
            raise CredentialUnavailableError(f"Token exchange request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"❌ Token exchange failed: {response.text}")
            raise CredentialUnavailableError("Failed to exchange authorization code")

        tokens = response.json()
        refresh_token = tokens.get("refresh_token")
        if not refresh_token:
            # Google only sends a refresh token with access_type=offline&prompt=consent
            raise CredentialInvalidError("No refresh token received")

        expires_in = tokens.get("expires_in", 3600)
        expiry = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        return self.cipher.encrypt(refresh_token), expiry
