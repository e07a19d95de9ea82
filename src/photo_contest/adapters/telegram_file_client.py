"""Telegram file download client."""

from dataclasses import dataclass

import httpx

from photo_contest.services.ingestion import MediaSource


@dataclass
class HttpxTelegramFileClient(MediaSource):
    """Telegram file client using httpx."""

    bot_token: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, bot_token: str) -> "HttpxTelegramFileClient":
        """Create a Telegram file client with a managed httpx session."""
        return cls(bot_token=bot_token, http_client=httpx.AsyncClient())

    async def download_file_bytes(self, file_id: str) -> bytes:
        """Resolve the file via getFile and stream its bytes to the end."""
        get_file_url = f"https://api.telegram.org/bot{self.bot_token}/getFile"
        response = await self.http_client.get(
            get_file_url, params={"file_id": file_id}, timeout=10
        )
        response.raise_for_status()
        payload = response.json()
        if not payload.get("ok"):
            raise RuntimeError("Telegram getFile failed")
        file_path = payload["result"]["file_path"]
        download_url = f"https://api.telegram.org/file/bot{self.bot_token}/{file_path}"
        chunks: list[bytes] = []
        async with self.http_client.stream("GET", download_url, timeout=20) as stream:
            stream.raise_for_status()
            async for chunk in stream.aiter_bytes():
                chunks.append(chunk)
        return b"".join(chunks)

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
