from .loader import default_project, load_project
from .types import (
    ClientConfig,
    ConfigError,
    EndpointConfig,
    ProjectConfig,
    RaceConfig,
    ServerConfig,
    UnsupportedConfigFormatError,
)

__all__ = [
    "load_project",
    "default_project",
    "ProjectConfig",
    "RaceConfig",
    "EndpointConfig",
    "ServerConfig",
    "ClientConfig",
    "ConfigError",
    "UnsupportedConfigFormatError",
]
