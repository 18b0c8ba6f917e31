# Backend/config/settings.py
import os
import logging
from typing import Optional
from dataclasses import dataclass, field, replace
from dotenv import load_dotenv
from core.constants import (
    DEFAULT_PORT,
    DEFAULT_RABBIT_URI,
    DEFAULT_DATABASE_NAME,
    DEFAULT_SYMBL_API_URL,
)
from core.exceptions import ConfigurationError

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

REQUIRED_CREDENTIALS = ("NEO4J_CONNECTION", "NEO4J_USERNAME", "NEO4J_PASSWORD")


def _env(name: str, default: str = ""):
    return field(default_factory=lambda: os.getenv(name, default))


def _env_int(name: str, default: int):
    def read() -> int:
        raw = os.getenv(name, "")
        if not raw:
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(f"{name} must be an integer, got {raw!r}")

    return field(default_factory=read)


def _env_bool(name: str, default: bool):
    fallback = "true" if default else "false"
    return field(default_factory=lambda: os.getenv(name, fallback).lower() == "true")


@dataclass(frozen=True)
class Credentials:
    """Graph store credentials, immutable once read from the environment"""
    connection_str: str
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(connection_str={self.connection_str!r}, username={self.username!r}, password='***')"


def load_credentials() -> Credentials:
    """
    Read the graph store credentials from the environment

    Raises:
        ConfigurationError: if any of NEO4J_CONNECTION, NEO4J_USERNAME or
            NEO4J_PASSWORD is missing or empty
    """
    values = {}
    for name in REQUIRED_CREDENTIALS:
        value = os.getenv(name, "")
        if not value:
            logger.error(f"{name} not found")
            raise ConfigurationError(f"{name} is required")
        logger.debug(f"{name} found")
        values[name] = value

    return Credentials(
        connection_str=values["NEO4J_CONNECTION"],
        username=values["NEO4J_USERNAME"],
        password=values["NEO4J_PASSWORD"],
    )


@dataclass
class ServerOptions:
    """Runtime options for the orchestrator"""
    bind_port: int = 0
    rabbit_uri: str = ""

    def with_defaults(self) -> "ServerOptions":
        """Return a copy with defaults applied to unset fields"""
        return replace(
            self,
            bind_port=self.bind_port or DEFAULT_PORT,
            rabbit_uri=self.rabbit_uri or DEFAULT_RABBIT_URI,
        )


@dataclass
class Settings:
    """Configuration settings for the analyzer service"""

    # Server
    bind_port: int = _env_int("ANALYZER_BIND_PORT", 0)

    # Message bus
    rabbit_uri: str = _env("RABBITMQ_URI", DEFAULT_RABBIT_URI)
    rabbit_prefetch_count: int = _env_int("RABBITMQ_PREFETCH_COUNT", 1)

    # Graph database (credentials are read separately, see load_credentials)
    neo4j_database: str = _env("NEO4J_DATABASE", DEFAULT_DATABASE_NAME)
    neo4j_verify_connectivity: bool = _env_bool("NEO4J_VERIFY_CONNECTIVITY", True)

    # Symbl analytics API
    symbl_app_id: str = _env("SYMBL_APP_ID")
    symbl_app_secret: str = _env("SYMBL_APP_SECRET")
    symbl_api_url: str = _env("SYMBL_API_URL", DEFAULT_SYMBL_API_URL)
    symbl_timeout: int = _env_int("SYMBL_TIMEOUT", 30)  # seconds

    # Logging
    log_level: str = _env("LOG_LEVEL", "INFO")
    log_file: Optional[str] = _env("LOG_FILE", "logs/analyzer.log")

    # Development and Testing
    debug_mode: bool = _env_bool("DEBUG_MODE", False)

    def validate(self) -> bool:
        """Validate numeric and enumerated settings"""
        errors = []

        if self.bind_port < 0 or self.bind_port > 65535:
            errors.append("ANALYZER_BIND_PORT must be between 0 and 65535")

        if self.rabbit_prefetch_count <= 0:
            errors.append("RABBITMQ_PREFETCH_COUNT must be positive")

        if self.symbl_timeout <= 0:
            errors.append("SYMBL_TIMEOUT must be positive")

        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            errors.append(f"Invalid LOG_LEVEL '{self.log_level}'")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        return True

    def server_options(self) -> ServerOptions:
        """Build orchestrator options from settings"""
        return ServerOptions(bind_port=self.bind_port, rabbit_uri=self.rabbit_uri)

    def to_dict(self) -> dict:
        """Convert settings to dictionary (excluding sensitive data)"""
        sensitive_fields = {"symbl_app_secret", "rabbit_uri"}

        return {
            k: v for k, v in self.__dict__.items()
            if k not in sensitive_fields
        }
