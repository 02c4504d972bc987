"""Catalog-site server directory (HTML listing + JSON redirect lookup)."""

from __future__ import annotations

import httpx
import structlog
from bs4 import BeautifulSoup, Tag

from flixarr.domain.entities.errors import UpstreamError
from flixarr.domain.entities.sources import MediaKind, ServerDescriptor, ServerKind

log = structlog.get_logger(__name__)

_LISTING_PATHS: dict[str, str] = {
    "movie": "/ajax/episode/list/{id}",
    "tv": "/ajax/episode/servers/{id}",
}
_REDIRECT_PATH = "/ajax/episode/sources/{id}"


def _parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "lxml")


def _entry_name(anchor: Tag) -> str:
    span = anchor.select_one("span")
    if span is not None:
        text = span.get_text(strip=True)
        if text:
            return text
    title = anchor.get("title")
    return str(title).strip() if title else ""


class HttpxServerDirectory:
    """Discovers servers for a catalog id on the upstream site.

    Listing pages are HTML fragments with one ``.nav-item a`` entry per
    server; each entry's ``data-id`` keys the JSON redirect endpoint that
    yields the concrete embed URL.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    def listing_url(self, media_id: str, kind: MediaKind) -> str:
        return self._base_url + _LISTING_PATHS[kind].format(id=media_id)

    def reference_url(self, server_id: str) -> str:
        return self._base_url + _REDIRECT_PATH.format(id=server_id)

    async def _get(self, url: str) -> httpx.Response:
        try:
            resp = await self._http.get(url)
        except httpx.HTTPError as exc:
            log.warning("upstream_request_failed", url=url, error=str(exc))
            raise UpstreamError(f"Upstream request failed: {exc}") from exc
        if resp.status_code >= 400:
            log.warning("upstream_bad_status", url=url, status=resp.status_code)
            raise UpstreamError(f"Upstream returned HTTP {resp.status_code} for {url}")
        return resp

    async def list_servers(
        self, media_id: str, kind: MediaKind
    ) -> list[ServerDescriptor]:
        url = self.listing_url(media_id, kind)
        resp = await self._get(url)

        soup = _parse_html(resp.text)
        if soup.select_one(".nav") is None and not soup.select(".nav-item"):
            log.warning("server_listing_unexpected", url=url)
            raise UpstreamError(f"Unexpected server listing structure for {media_id!r}")

        servers: list[ServerDescriptor] = []
        seen: set[str] = set()
        for anchor in soup.select(".nav-item a"):
            server_id = str(anchor.get("data-id") or "").strip()
            if not server_id or server_id in seen:
                continue
            seen.add(server_id)
            name = _entry_name(anchor)
            servers.append(
                ServerDescriptor(
                    id=server_id,
                    display_name=name,
                    reference=self.reference_url(server_id),
                    kind=ServerKind.from_name(name),
                )
            )

        log.info(
            "servers_listed",
            media_id=media_id,
            media_kind=kind,
            count=len(servers),
        )
        return servers

    async def resolve_embed_url(self, descriptor: ServerDescriptor) -> str:
        resp = await self._get(descriptor.reference)
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                f"Redirect lookup for server {descriptor.display_name!r} "
                "returned non-JSON body"
            ) from exc

        link = data.get("link") if isinstance(data, dict) else None
        if not isinstance(link, str) or not link.strip():
            raise UpstreamError(
                f"No embed link for server {descriptor.display_name!r}"
            )
        return link.strip()
