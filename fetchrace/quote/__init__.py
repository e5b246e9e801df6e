from .client import QuoteClient
from .files import append_quote, quote_line, write_quote
from .repository import QuoteRecord, QuoteRepository
from .server import QUOTE_PATH, build_app, create_app
from .service import QuoteService
from .types import PersistDeadlineError, Quote, QuoteError

__all__ = [
    "Quote",
    "QuoteError",
    "PersistDeadlineError",
    "QuoteService",
    "QuoteRepository",
    "QuoteRecord",
    "QuoteClient",
    "create_app",
    "build_app",
    "QUOTE_PATH",
    "append_quote",
    "write_quote",
    "quote_line",
]
