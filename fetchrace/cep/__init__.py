from .lookup import cep_tasks, decode_address, endpoint_url, format_cep, normalize_cep
from .types import ApiCepAddress, InvalidCEPError, ViaCepAddress

__all__ = [
    "normalize_cep",
    "format_cep",
    "endpoint_url",
    "cep_tasks",
    "decode_address",
    "ApiCepAddress",
    "ViaCepAddress",
    "InvalidCEPError",
]
