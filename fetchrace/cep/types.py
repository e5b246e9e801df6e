from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, get_type_hints


class InvalidCEPError(ValueError):
    def __init__(self, raw: str):
        super().__init__(f"Invalid CEP: {raw}")
        self.raw = raw


_BLANKS: dict[type, Any] = {int: 0, bool: False}


def _pick(cls: type, payload: Mapping[str, Any], renames: Mapping[str, str]) -> dict[str, Any]:
    hints = get_type_hints(cls)
    values = {}
    for f in fields(cls):
        key = renames.get(f.name, f.name)
        default = _BLANKS.get(hints[f.name], "")
        values[f.name] = payload.get(key, default)
    return values


@dataclass(frozen=True)
class ApiCepAddress:
    code: str
    state: str
    city: str
    district: str
    address: str
    status: int
    ok: bool
    status_text: str

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> ApiCepAddress:
        return cls(**_pick(cls, payload, {"status_text": "statusText"}))


@dataclass(frozen=True)
class ViaCepAddress:
    cep: str
    logradouro: str
    complemento: str
    bairro: str
    localidade: str
    uf: str
    ibge: str
    gia: str
    ddd: str
    siafi: str

    @classmethod
    def from_json(cls, payload: Mapping[str, Any]) -> ViaCepAddress:
        return cls(**_pick(cls, payload, {}))
