# src/nodemeta/clients/imds.py
"""
Async client for the EC2 instance metadata service (IMDS).

Requests use the IMDSv2 session token handshake. When the service refuses to
issue tokens (403, 404 or 405 on the token request) the client falls back to
unauthenticated IMDSv1 requests for the rest of its lifetime.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx
from pydantic import ValidationError

from ..core.config import config
from ..core.exceptions import MetadataServiceError
from ..models.instance import InstanceIdentityDocument
from ..utils.http_client import get_async_http_client

logger = logging.getLogger(__name__)

TOKEN_PATH = "/latest/api/token"
METADATA_PATH = "/latest/meta-data/"
IDENTITY_DOCUMENT_PATH = "/latest/dynamic/instance-identity/document"

TOKEN_TTL_HEADER = "X-aws-ec2-metadata-token-ttl-seconds"
TOKEN_HEADER = "X-aws-ec2-metadata-token"

# Refresh the token this many seconds before the service expires it.
TOKEN_EXPIRY_MARGIN = 60.0

_TOKEN_FALLBACK_STATUSES = (403, 404, 405)


class InstanceMetadataService:
    """Reads instance metadata from the local IMDS endpoint."""

    def __init__(
        self,
        endpoint: Optional[str] = None,
        token_ttl: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.endpoint = (endpoint or config.IMDS_ENDPOINT).rstrip("/")
        self.token_ttl = token_ttl or config.IMDS_TOKEN_TTL_SECONDS
        self._http = http_client or get_async_http_client(base_url=self.endpoint)

        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._tokens_disabled = False
        self._token_lock = asyncio.Lock()

    async def _get_token(self) -> Optional[str]:
        """
        Returns a valid session token, or None once the service has signalled
        that it does not support IMDSv2.
        """
        if self._tokens_disabled:
            return None
        if self._token and time.monotonic() < self._token_expires_at:
            return self._token

        async with self._token_lock:
            # Double-check after acquiring the lock
            if self._tokens_disabled:
                return None
            if self._token and time.monotonic() < self._token_expires_at:
                return self._token

            try:
                response = await self._http.put(TOKEN_PATH, headers={TOKEN_TTL_HEADER: str(self.token_ttl)})
            except httpx.HTTPError as e:
                raise MetadataServiceError(f"fetching metadata session token: {e}") from e

            if response.status_code in _TOKEN_FALLBACK_STATUSES:
                logger.info(
                    "Metadata service refused a session token (HTTP %s); falling back to IMDSv1.",
                    response.status_code,
                )
                self._tokens_disabled = True
                return None

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise MetadataServiceError(f"fetching metadata session token: {e}") from e

            self._token = response.text
            self._token_expires_at = time.monotonic() + max(self.token_ttl - TOKEN_EXPIRY_MARGIN, 1.0)
            logger.debug("Obtained metadata session token valid for %ss", self.token_ttl)
            return self._token

    async def _get(self, path: str) -> httpx.Response:
        token = await self._get_token()
        headers = {TOKEN_HEADER: token} if token else {}

        try:
            response = await self._http.get(path, headers=headers)
            if response.status_code == 401 and token:
                # The token expired early (e.g. the service restarted); refresh it once.
                logger.debug("Metadata session token rejected; requesting a new one.")
                self._token = None
                token = await self._get_token()
                headers = {TOKEN_HEADER: token} if token else {}
                response = await self._http.get(path, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise MetadataServiceError(f"querying metadata path {path}: {e}") from e

        return response

    async def get_metadata(self, path: str) -> str:
        """Returns the raw value stored under ``latest/meta-data/<path>``."""
        response = await self._get(METADATA_PATH + path.lstrip("/"))
        return response.text

    async def get_instance_identity_document(self) -> InstanceIdentityDocument:
        response = await self._get(IDENTITY_DOCUMENT_PATH)
        try:
            return InstanceIdentityDocument.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise MetadataServiceError(f"parsing instance identity document: {e}") from e

    async def get_region(self) -> str:
        document = await self.get_instance_identity_document()
        if not document.region:
            raise MetadataServiceError("invalid region received for ec2metadata instance")
        return document.region

    async def close(self):
        await self._http.aclose()
        logger.debug("Metadata service http client closed.")
