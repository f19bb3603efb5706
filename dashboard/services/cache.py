from __future__ import annotations
# dashboard/services/cache.py
import httpx
import structlog
from dashboard.config import settings

logger = structlog.get_logger()

# One pooled client per process, shared by every cache call.
_http = httpx.AsyncClient(
    timeout=5.0,
    limits=httpx.Limits(max_connections=20, max_keepalive_connections=10, keepalive_expiry=30),
)


class UpstashClient:
    """Minimal Upstash Redis REST client. Commands are POSTed as JSON arrays."""

    def __init__(self):
        self.url = settings.UPSTASH_REDIS_REST_URL
        self.headers = {"Authorization": f"Bearer {settings.UPSTASH_REDIS_REST_TOKEN}"}

    async def command(self, *args):
        r = await _http.post(self.url, headers=self.headers, json=[str(a) for a in args])
        r.raise_for_status()
        return r.json().get("result")

    async def get(self, key: str) -> str | None:
        return await self.command("GET", key)

    async def set(self, key: str, value: str, ex: int = 300):
        await self.command("SET", key, value, "EX", ex)

    async def delete(self, key: str) -> int:
        return await self.command("DEL", key) or 0

    async def ping(self) -> bool:
        return await self.command("PING") == "PONG"


cache = UpstashClient()


def page_key(path: str) -> str:
    return f"page:{path}"


async def get_cached_page(path: str) -> str | None:
    if not settings.cache_enabled:
        return None
    try:
        return await cache.get(page_key(path))
    except httpx.HTTPError as e:
        logger.warning("page_cache_read_failed", path=path, error=str(e))
        return None


async def cache_page(path: str, body: str):
    if not settings.cache_enabled:
        return
    try:
        await cache.set(page_key(path), body, ex=settings.PAGE_CACHE_TTL_SECONDS)
    except httpx.HTTPError as e:
        logger.warning("page_cache_write_failed", path=path, error=str(e))


async def revalidate_path(path: str):
    """Drop the cached rendering of `path` so the next read recomputes it."""
    if not settings.cache_enabled:
        logger.debug("path_revalidate_skipped", path=path)
        return
    try:
        removed = await cache.delete(page_key(path))
    except httpx.HTTPError as e:
        # The write already happened; a stale page expires on its own TTL.
        logger.warning("path_revalidate_failed", path=path, error=str(e))
        return
    logger.info("path_revalidated", path=path, removed=removed)
