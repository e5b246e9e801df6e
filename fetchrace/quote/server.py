from __future__ import annotations

import asyncio
import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from fetchrace.config import ServerConfig
from fetchrace.fetch import create_client

from .files import append_quote
from .repository import QuoteRepository
from .service import QuoteService
from .types import QuoteError

logger = logging.getLogger(__name__)

QUOTE_PATH = "/cotacao"


def create_app(
    service: QuoteService,
    repo: QuoteRepository,
    *,
    quote_file: str | Path,
    timeout_s: float,
) -> FastAPI:
    """
    Build the quote server.

    One deadline of `timeout_s` is shared by the upstream fetch and the
    database insert of each request. The insert is not cancelled from here:
    the repository rolls it back once the deadline has passed, so a 500 for
    a late insert never leaves a stored row behind. Writing the quote file
    happens after both and never fails the request.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        repo.create_table()
        yield
        await service.client.aclose()

    app = FastAPI(title="fetchrace quote server", lifespan=lifespan)

    @app.get(QUOTE_PATH)
    async def get_quote() -> dict[str, Any]:
        deadline = asyncio.get_running_loop().time() + timeout_s
        commit_deadline = time.monotonic() + timeout_s

        try:
            async with asyncio.timeout_at(deadline):
                quote = await service.get_usd_quote()
        except (QuoteError, TimeoutError) as exc:
            logger.error(f"Failed to fetch the USD quote: {exc!r}")
            raise HTTPException(
                status_code=500, detail="failed to fetch the USD quote"
            ) from exc

        try:
            quote_id = await asyncio.to_thread(
                repo.insert, quote, deadline=commit_deadline
            )
        except (SQLAlchemyError, TimeoutError) as exc:
            logger.error(f"Failed to save the USD quote: {exc!r}")
            raise HTTPException(
                status_code=500, detail="failed to save the USD quote"
            ) from exc

        try:
            append_quote(quote_file, quote.bid)
        except OSError as exc:
            logger.error(f"Could not write {quote_file}: {exc}")
        else:
            logger.info(f"Quote appended to {quote_file}")

        return {"id": quote_id, **quote.to_json()}

    return app


def build_app(config: ServerConfig) -> FastAPI:
    client = create_client(config.timeout_s)
    service = QuoteService(client, config.source_url)
    repo = QuoteRepository.from_url(config.database_url)
    return create_app(
        service, repo, quote_file=config.quote_file, timeout_s=config.timeout_s
    )
