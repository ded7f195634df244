import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class SharedHTTPClient:
    """Pooled async HTTP client shared by the outbound integrations.

    No timeout is configured here; httpx's defaults apply.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        limits = httpx.Limits(
            max_keepalive_connections=10,
            max_connections=20,
            keepalive_expiry=30.0,
        )
        self._client = httpx.AsyncClient(
            limits=limits,
            follow_redirects=True,
            transport=transport,
        )

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """Async GET through the pooled connection"""
        return await self._client.get(url, **kwargs)

    @property
    def is_closed(self) -> bool:
        return self._client.is_closed

    async def close(self):
        """Close the underlying httpx client"""
        await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


# Global HTTP client instance
_global_client: Optional[SharedHTTPClient] = None


async def get_http_client() -> SharedHTTPClient:
    """Get or create the global HTTP client instance"""
    global _global_client
    if _global_client is None or _global_client.is_closed:
        _global_client = SharedHTTPClient()
        logger.debug("Created shared HTTP client")
    return _global_client


async def cleanup_http_client():
    """Close the global HTTP client"""
    global _global_client
    if _global_client:
        await _global_client.close()
        _global_client = None
