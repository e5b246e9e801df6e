from .http import create_client, fetch_text, http_task, json_object
from .types import FetchError, HTTPStatusError

__all__ = [
    "create_client",
    "fetch_text",
    "http_task",
    "json_object",
    "FetchError",
    "HTTPStatusError",
]
