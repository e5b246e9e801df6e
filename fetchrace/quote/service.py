import logging

import httpx

from fetchrace.fetch import FetchError, fetch_text, json_object

from .types import Quote, QuoteError

logger = logging.getLogger(__name__)

PAIR_KEY = "USDBRL"


class QuoteService:
    """Fetches the latest USD/BRL quote from the upstream quote API."""

    def __init__(self, client: httpx.AsyncClient, source_url: str):
        self.client = client
        self.source_url = source_url

    async def get_usd_quote(self) -> Quote:
        try:
            body = json_object(await fetch_text(self.client, self.source_url))
        except FetchError as exc:
            logger.warning(f"Quote request to {self.source_url} failed: {exc}")
            raise QuoteError(f"error fetching the USD quote: {exc}") from exc

        pair = body.get(PAIR_KEY)
        if not isinstance(pair, dict):
            raise QuoteError(f"quote response has no '{PAIR_KEY}' object")

        return Quote.from_json(pair)
