from __future__ import annotations

from typing import Any, Callable, Mapping

import httpx

from fetchrace.config import EndpointConfig
from fetchrace.fetch import http_task, json_object
from fetchrace.race import FetchTask

from .types import ApiCepAddress, InvalidCEPError, ViaCepAddress

ADDRESS_DECODERS: dict[str, Callable[[Mapping[str, Any]], object]] = {
    "apicep": ApiCepAddress.from_json,
    "viacep": ViaCepAddress.from_json,
}


def normalize_cep(raw: str) -> str:
    cep = raw.strip().replace("-", "")
    if len(cep) != 8 or not cep.isdigit():
        raise InvalidCEPError(raw)
    return cep


def format_cep(cep: str) -> str:
    return f"{cep[:5]}-{cep[5:]}"


def endpoint_url(template: str, cep: str) -> str:
    return template.format(cep=cep, cep_dashed=format_cep(cep))


def cep_tasks(
    endpoints: list[EndpointConfig], cep: str, client: httpx.AsyncClient
) -> list[FetchTask]:
    """One FetchTask per endpoint; a body that is not a JSON object fails the task."""
    return [
        http_task(ep.id, endpoint_url(ep.url, cep), client, validate=json_object)
        for ep in endpoints
    ]


def decode_address(endpoint_id: str, payload: str) -> object:
    """
    Turn a winning payload into an address.

    Endpoints without a known decoder return the payload untouched.
    Raises FetchError when the payload is empty or not a JSON object.
    """
    body = json_object(payload)
    decoder = ADDRESS_DECODERS.get(endpoint_id)
    if decoder is None:
        return payload
    return decoder(body)
