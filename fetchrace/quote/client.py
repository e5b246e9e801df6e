import asyncio
import json
import logging

import httpx

from .types import QuoteError, parse_number

logger = logging.getLogger(__name__)


class QuoteClient:
    """Asks the quote server for the current bid under a deadline."""

    def __init__(self, client: httpx.AsyncClient, server_url: str, timeout_s: float):
        self.client = client
        self.server_url = server_url
        self.timeout_s = timeout_s

    async def get_bid(self) -> float:
        try:
            async with asyncio.timeout(self.timeout_s):
                response = await self.client.get(self.server_url)
        except (TimeoutError, httpx.TimeoutException) as exc:
            logger.warning(f"Deadline reached requesting {self.server_url}")
            raise QuoteError(
                f"timed out after {self.timeout_s:.3f}s requesting {self.server_url}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning(f"Request to {self.server_url} failed: {exc}")
            raise QuoteError(f"error requesting the quote: {exc}") from exc

        if response.status_code != 200:
            raise QuoteError(
                f"HTTP response error: {response.status_code} {response.reason_phrase}, "
                f"Message: {response.text}"
            )

        try:
            body = response.json()
        except json.JSONDecodeError as exc:
            raise QuoteError("error decoding the server response") from exc

        if not isinstance(body, dict) or "bid" not in body:
            raise QuoteError("server response has no 'bid'")

        return parse_number(body["bid"], "bid")
