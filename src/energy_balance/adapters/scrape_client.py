"""HTTP client for the remote diary scrape worker."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class EnergyScraper(Protocol):
    """Interface for reading energy summaries off the diary UI."""

    async def scrape_energy(self, dates: list[str]) -> list[dict[str, object]]:
        """Return one raw scraped entry per requested date."""


@dataclass
class HttpxEnergyScrapeClient(EnergyScraper):
    """HTTPX-backed client for a scrape worker that drives the browser."""

    base_url: str
    http_client: httpx.AsyncClient
    token: str | None = None
    timeout_seconds: float = 240.0

    @classmethod
    def create(
        cls, base_url: str, token: str | None = None, timeout_seconds: float = 240.0
    ) -> "HttpxEnergyScrapeClient":
        """Create a scrape client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            token=token,
            timeout_seconds=timeout_seconds,
        )

    async def scrape_energy(self, dates: list[str]) -> list[dict[str, object]]:
        """Request energy summaries for dates, newest first."""
        if not dates:
            return []
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        response = await self.http_client.post(
            f"{self.base_url}/scrape/energy",
            json={"dates": dates},
            headers=headers,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("success", True):
            raise RuntimeError(f"Energy scrape failed: {payload.get('error', 'unknown')}")
        entries = payload.get("entries", [])
        return [entry for entry in entries if isinstance(entry, dict)]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
