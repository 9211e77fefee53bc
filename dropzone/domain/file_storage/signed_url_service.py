"""
Signed URL Service

Service for generating time-limited signed URLs for blobs served by the
application itself (local storage backend). A signed URL is a capability:
anyone holding it can read the blob until it expires.
"""

import hashlib
import hmac
import os
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote, urlencode

from .value_objects import DEFAULT_DOWNLOAD_URL_TTL_MINUTES


@dataclass
class SignedUrl:
    """
    Represents a signed URL with expiration.
    """

    url: str
    path: str
    expires_at: datetime
    signature: str


class SignedUrlService:
    """
    Service for generating and validating signed blob URLs.

    URLs carry the expiry as a unix timestamp and an HMAC-SHA256 signature
    over ``path:expires``, so validation needs no server-side state.
    """

    def __init__(
        self, secret_key: Optional[str] = None, base_url: Optional[str] = None
    ):
        """
        Initialize SignedUrlService.

        Args:
            secret_key: Secret key for HMAC signing (uses SECRET_KEY env var or
                generates one if not provided)
            base_url: Base URL for blob download endpoints. If not provided,
                uses the `DOWNLOAD_BASE_URL` environment variable for public
                client access, falling back to `API_BASE_URL`. If neither is
                set, the relative path '/api/v1/blobs' is used.
        """
        self.secret_key = (
            secret_key or os.getenv("SECRET_KEY") or self._generate_secret_key()
        )
        if base_url:
            self.base_url = base_url.rstrip("/")
        else:
            public_base = os.getenv("DOWNLOAD_BASE_URL") or os.getenv("API_BASE_URL")
            if public_base:
                self.base_url = public_base.rstrip("/") + "/api/v1/blobs"
            else:
                self.base_url = "/api/v1/blobs"

    @staticmethod
    def _generate_secret_key(length: int = 32) -> str:
        """Generate a cryptographically secure secret key."""
        return secrets.token_hex(length)

    def generate_signed_url(
        self,
        path: str,
        ttl_minutes: int = DEFAULT_DOWNLOAD_URL_TTL_MINUTES,
        now: Optional[datetime] = None,
    ) -> SignedUrl:
        """
        Generate a signed URL for blob access.

        Args:
            path: Blob path (e.g., 'team-q1/report.pdf')
            ttl_minutes: Time to live in minutes
            now: Reference time (defaults to current UTC time)

        Returns:
            SignedUrl object with URL and expiration information
        """
        now = now or datetime.now(timezone.utc)
        expires = int((now + timedelta(minutes=ttl_minutes)).timestamp())
        signature = self._generate_signature(path, expires)

        query = urlencode({"expires": expires, "signature": signature})
        url = f"{self.base_url}/{quote(path)}?{query}"

        return SignedUrl(
            url=url,
            path=path,
            expires_at=datetime.fromtimestamp(expires, tz=timezone.utc),
            signature=signature,
        )

    def _generate_signature(self, path: str, expires: int) -> str:
        """
        Generate HMAC signature for a path and expiration timestamp.

        Args:
            path: Blob path
            expires: Expiration as unix timestamp

        Returns:
            HMAC signature as hex string
        """
        message = f"{path}:{expires}"
        return hmac.new(
            self.secret_key.encode("utf-8"), message.encode("utf-8"), hashlib.sha256
        ).hexdigest()

    def validate_signature(self, path: str, expires: int, signature: str) -> bool:
        """
        Validate the HMAC signature for a path, ignoring expiry.

        Uses constant-time comparison to prevent timing attacks.
        """
        if not signature:
            return False
        expected = self._generate_signature(path, expires)
        return hmac.compare_digest(signature, expected)

    def is_expired(self, expires: int, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now.timestamp() >= expires
