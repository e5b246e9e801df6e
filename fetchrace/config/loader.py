import json
import tomllib
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .types import (
    ClientConfig,
    ConfigError,
    EndpointConfig,
    ProjectConfig,
    RaceConfig,
    ServerConfig,
    UnsupportedConfigFormatError,
)


def default_project() -> ProjectConfig:
    return ProjectConfig()


def load_project(path: str | Path) -> ProjectConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return _build_project_config(raw_file)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    parsers: dict[str, tuple[Callable[[str], Any], type[Exception]]] = {
        "yaml": (yaml.safe_load, yaml.YAMLError),
        "toml": (tomllib.loads, tomllib.TOMLDecodeError),
        "json": (json.loads, json.JSONDecodeError),
    }
    parse, parse_error = parsers[fmt]

    try:
        raw_file = parse(path.read_text(encoding="utf-8"))
    except parse_error as exc:
        raise ConfigError(f"{path}: invalid {fmt.upper()}") from exc

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt.upper()} parsed successfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_project_config(raw: Mapping[str, Any]) -> ProjectConfig:
    _check_keys("config", raw, {"race", "server", "client"})

    project = ProjectConfig()

    if "race" in raw:
        project.race = _build_race_config(_section(raw, "race"))

    if "server" in raw:
        project.server = _build_server_config(_section(raw, "server"))

    if "client" in raw:
        project.client = _build_client_config(_section(raw, "client"))

    return project


def _build_race_config(fields: Mapping[str, Any]) -> RaceConfig:
    _check_keys("race", fields, {"deadline_ms", "strict", "endpoints"})
    race = RaceConfig()

    if "deadline_ms" in fields:
        race.deadline_ms = _positive_int("race", "deadline_ms", fields["deadline_ms"])

    if "strict" in fields:
        if not isinstance(fields["strict"], bool):
            raise ConfigError("race: 'strict' should be a boolean")
        race.strict = fields["strict"]

    if "endpoints" in fields:
        raw_endpoints = fields["endpoints"]
        if not isinstance(raw_endpoints, Mapping):
            raise ConfigError(
                f"race: 'endpoints' must be a mapping, got {type(raw_endpoints)}"
            )

        endpoints: dict[str, EndpointConfig] = {}
        for endpoint_id, endpoint_fields in raw_endpoints.items():
            if not isinstance(endpoint_id, str):
                raise ConfigError(
                    f"Endpoint id must be a string, got {type(endpoint_id)}"
                )

            endpoint_id_norm = endpoint_id.strip()

            if len(endpoint_id_norm) < 1:
                raise ConfigError("An endpoint id can't be empty")

            if endpoint_id_norm in endpoints:
                raise ConfigError(
                    f"Duplicate endpoint id after normalization: {endpoint_id_norm}"
                )

            if not isinstance(endpoint_fields, Mapping):
                raise ConfigError(f"{endpoint_id_norm} must be a mapping")

            endpoints[endpoint_id_norm] = _build_endpoint_config(
                endpoint_id_norm, endpoint_fields
            )

        if len(endpoints) != 2:
            raise ConfigError(
                f"race: exactly two endpoints are raced, got {len(endpoints)}"
            )

        race.endpoints = endpoints

    return race


def _build_endpoint_config(endpoint_id: str, fields: Mapping[str, Any]) -> EndpointConfig:
    _check_keys(endpoint_id, fields, {"url", "label"})

    if "url" not in fields:
        raise ConfigError(f"{endpoint_id}: missing 'url'")

    url = _non_empty_str(endpoint_id, "url", fields["url"])

    try:
        url.format(cep="00000000", cep_dashed="00000-000")
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(
            f"{endpoint_id}: url may only use the {{cep}} and {{cep_dashed}} placeholders"
        ) from exc

    label = endpoint_id
    if "label" in fields:
        label = _non_empty_str(endpoint_id, "label", fields["label"])

    return EndpointConfig(endpoint_id, url, label)


def _build_server_config(fields: Mapping[str, Any]) -> ServerConfig:
    keys = {"host", "port", "source_url", "timeout_ms", "database_url", "quote_file"}
    _check_keys("server", fields, keys)
    server = ServerConfig()

    for key in ("host", "source_url", "database_url", "quote_file"):
        if key in fields:
            setattr(server, key, _non_empty_str("server", key, fields[key]))

    if "port" in fields:
        server.port = _port("server", fields["port"])

    if "timeout_ms" in fields:
        server.timeout_ms = _positive_int("server", "timeout_ms", fields["timeout_ms"])

    return server


def _build_client_config(fields: Mapping[str, Any]) -> ClientConfig:
    _check_keys("client", fields, {"server_url", "timeout_ms", "quote_file"})
    client = ClientConfig()

    for key in ("server_url", "quote_file"):
        if key in fields:
            setattr(client, key, _non_empty_str("client", key, fields[key]))

    if "timeout_ms" in fields:
        client.timeout_ms = _positive_int("client", "timeout_ms", fields["timeout_ms"])

    return client


def _section(raw: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    if not isinstance(raw[name], Mapping):
        raise ConfigError(f"'{name}' must be a mapping, got {type(raw[name])}")
    return raw[name]


def _check_keys(where: str, fields: Mapping[str, Any], keys: set[str]) -> None:
    for field in fields.keys():
        if field not in keys:
            raise ConfigError(f"{where}: Can't process: {field}")


def _non_empty_str(where: str, key: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{where}: '{key}' should be a string")

    if len(value.strip()) < 1:
        raise ConfigError(f"{where}: '{key}' can't be empty")

    return value.strip()


def _positive_int(where: str, key: str, value: Any) -> int:
    # bool is an int subclass; `true` is not a duration
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{where}: '{key}' should be an integer")

    if value <= 0:
        raise ConfigError(f"{where}: '{key}' must be positive, got {value}")

    return value


def _port(where: str, value: Any) -> int:
    port = _positive_int(where, "port", value)
    if port > 65535:
        raise ConfigError(f"{where}: 'port' out of range: {port}")
    return port
