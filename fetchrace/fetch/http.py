import json
import logging
import time
from collections.abc import Callable
from typing import Any, Mapping

import httpx

from fetchrace.race import FetchTask

from .types import FetchError, HTTPStatusError

logger = logging.getLogger(__name__)

USER_AGENT = "fetchrace/1.0"


def create_client(
    timeout_s: float, transport: httpx.AsyncBaseTransport | None = None
) -> httpx.AsyncClient:
    """Build the single outbound client a program run shares between its fetches."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_s),
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT, "Accept": "application/json, */*;q=0.8"},
        transport=transport,
    )


async def fetch_text(client: httpx.AsyncClient, url: str) -> str:
    """GET a URL and return its body, raising FetchError on any failure."""
    start = time.monotonic()
    try:
        response = await client.get(url)
    except httpx.TimeoutException as exc:
        raise FetchError(f"Timeout fetching {url}: {exc}") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Connection error for {url}: {exc}") from exc

    duration = time.monotonic() - start
    logger.debug(f"GET {url} -> {response.status_code} in {duration:.3f}s")

    if not 200 <= response.status_code < 300:
        raise HTTPStatusError(url, response.status_code)

    return response.text


def json_object(text: str) -> Mapping[str, Any]:
    try:
        value = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FetchError("response body is not valid JSON") from exc

    if not isinstance(value, Mapping):
        raise FetchError(f"expected a JSON object, got {type(value).__name__}")

    return value


def http_task(
    task_id: str,
    url: str,
    client: httpx.AsyncClient,
    *,
    validate: Callable[[str], object] | None = None,
) -> FetchTask:
    """
    Wrap a GET of `url` as a FetchTask.

    `validate` is called with the body and should raise when the payload is
    unusable, which turns a 2xx response into a task failure.
    """

    async def call() -> str:
        text = await fetch_text(client, url)
        if validate is not None:
            validate(text)
        return text

    return FetchTask(task_id, url, call)
