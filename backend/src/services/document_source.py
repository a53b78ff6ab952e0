"""Bulk document sources for the photo export"""

import asyncio
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from src.config import settings
from src.services.errors import TransportError
from src.services.s3_service import S3Service

logger = logging.getLogger(__name__)


class DocumentSourceError(TransportError):
    """Document fetch proxy unreachable or returned an error"""
    pass


class S3DocumentSource:
    """Reads the export object straight from the bucket"""

    def __init__(self, s3_service: Optional[S3Service] = None, s3_key: Optional[str] = None):
        self.s3_service = s3_service or S3Service()
        self.s3_key = s3_key or settings.s3_export_key

    async def fetch_documents(self) -> Any:
        logger.info(f"Fetching photo export from s3://{self.s3_service.bucket}/{self.s3_key}")
        return await asyncio.to_thread(self.s3_service.download_json, self.s3_key)


class HttpDocumentSource:
    """Fetches the export through the document-fetch proxy"""

    def __init__(self, url: Optional[str] = None, timeout_seconds: Optional[float] = None):
        self.url = url or settings.document_proxy_url
        self.timeout_seconds = timeout_seconds or settings.document_proxy_timeout_seconds
        if not self.url:
            raise DocumentSourceError("document_proxy_url is not configured")

    @retry(
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    async def _get(self) -> httpx.Response:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            response = await client.get(self.url)
            response.raise_for_status()
            return response

    async def fetch_documents(self) -> Any:
        """
        Fetch and decode the export.

        Returns:
            Parsed JSON body

        Raises:
            DocumentSourceError: If the proxy is unreachable, errors, or returns invalid JSON
        """
        logger.info(f"Fetching photo export via proxy {self.url}")
        try:
            response = await self._get()
        except httpx.HTTPStatusError as e:
            logger.error(f"Document proxy returned {e.response.status_code}")
            raise DocumentSourceError(f"Document proxy returned {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.error(f"Document proxy unreachable: {e}")
            raise DocumentSourceError(f"Document proxy unreachable: {str(e)}")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Document proxy returned invalid JSON: {e}")
            raise DocumentSourceError(f"Invalid JSON from document proxy: {str(e)}")


def get_document_source() -> Any:
    """Build the configured bulk document source"""
    if settings.document_source == "http":
        return HttpDocumentSource()
    if settings.document_source == "s3":
        return S3DocumentSource()
    raise ValueError(f"Unknown document_source: {settings.document_source}")
