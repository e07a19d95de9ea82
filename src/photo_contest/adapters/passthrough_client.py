"""Forwarding of updates the contest flow does not handle."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class PassthroughClient(Protocol):
    """Interface for handing unhandled updates to a downstream service."""

    async def forward(self, update: dict[str, object]) -> None:
        """Forward a raw webhook update."""


@dataclass
class HttpxPassthroughClient(PassthroughClient):
    """Forward raw updates to a downstream webhook with httpx."""

    url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, url: str) -> "HttpxPassthroughClient":
        """Create a passthrough client with a managed httpx session."""
        return cls(url=url, http_client=httpx.AsyncClient())

    async def forward(self, update: dict[str, object]) -> None:
        """POST the update as JSON to the downstream URL."""
        response = await self.http_client.post(
            self.url, json={"events": [update]}, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
