from dataclasses import dataclass, field

APICEP_URL = "https://cdn.apicep.com/file/apicep/{cep_dashed}.json"
VIACEP_URL = "https://viacep.com.br/ws/{cep}/json/"
USD_BRL_URL = "https://economia.awesomeapi.com.br/json/last/USD-BRL"


@dataclass
class EndpointConfig:
    id: str
    url: str
    label: str


def _default_endpoints() -> dict[str, EndpointConfig]:
    return {
        "apicep": EndpointConfig("apicep", APICEP_URL, "CDN apicep"),
        "viacep": EndpointConfig("viacep", VIACEP_URL, "ViaCEP"),
    }


@dataclass
class RaceConfig:
    deadline_ms: int = 1000
    strict: bool = False
    endpoints: dict[str, EndpointConfig] = field(default_factory=_default_endpoints)

    @property
    def deadline_s(self) -> float:
        return self.deadline_ms / 1000

    def endpoint_ids(self) -> list[str]:
        return list(self.endpoints)

    def get_endpoint(self, id: str) -> EndpointConfig:
        if id not in self.endpoints:
            raise KeyError(id)

        return self.endpoints[id]


@dataclass
class ServerConfig:
    host: str = "0.0.0.0"
    port: int = 8080
    source_url: str = USD_BRL_URL
    timeout_ms: int = 200
    database_url: str = "sqlite:///quotes.db"
    quote_file: str = "cotacao.txt"

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class ClientConfig:
    server_url: str = "http://localhost:8080/cotacao"
    timeout_ms: int = 300
    quote_file: str = "cotacao.txt"

    @property
    def timeout_s(self) -> float:
        return self.timeout_ms / 1000


@dataclass
class ProjectConfig:
    race: RaceConfig = field(default_factory=RaceConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
