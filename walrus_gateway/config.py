"""
Configuration management for the Walrus site gateway.
"""

import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from dotenv import load_dotenv

from .shared.encoding import is_valid_object_id, normalize_object_id
from .shared.exceptions import ConfigurationError

# Load environment variables
load_dotenv()


DEFAULT_ALLOWED_FILE_TYPES = (".html", ".css", ".js", ".mjs", ".jsx", ".tsx", ".json")
DEFAULT_SITE_PACKAGE = "0xf99aee9f21493e1590e7e5a9aea6f343a1f381031a04a732724871fc294be799"


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_list(value: str) -> Tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


def parse_site_names(value: str) -> Dict[str, str]:
    """
    Parse ``name=0x...,other=0x...`` into a subdomain -> object id map.

    Raises:
        ConfigurationError: If an entry is malformed or the id is not an object id
    """
    site_names: Dict[str, str] = {}
    for entry in _parse_list(value):
        name, sep, object_id = entry.partition("=")
        name, object_id = name.strip().lower(), object_id.strip()
        if not sep or not name or not object_id:
            raise ConfigurationError(f"Invalid SITE_NAMES entry: {entry!r}")
        if not is_valid_object_id(normalize_object_id(object_id)):
            raise ConfigurationError(f"SITE_NAMES entry {name!r} is not a valid object id")
        site_names[name] = normalize_object_id(object_id)
    return site_names


@dataclass(frozen=True)
class Config:
    """
    Gateway configuration, loaded once at startup and never mutated.
    """

    # Networks
    sui_network: str = "testnet"
    walrus_network: str = "testnet"
    rpc_url: str = "https://fullnode.testnet.sui.io"
    aggregator_url: str = "https://aggregator.walrus-testnet.walrus.space"
    site_package: str = DEFAULT_SITE_PACKAGE

    # Portal / resolution
    portal_domain_name_length: int = 7
    portal_domain: Optional[str] = None
    b36_domain_resolution_support: bool = True
    site_names: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    allowed_file_types: Tuple[str, ...] = DEFAULT_ALLOWED_FILE_TYPES

    # Aggregator fetch
    fetch_max_retries: int = 2
    fetch_retry_delay_ms: int = 1000
    verify_blob_hash: bool = False
    request_timeout: float = 10.0

    # Server
    host: str = "0.0.0.0"
    port: int = 5000
    allowed_origins: Tuple[str, ...] = ("http://localhost:5000", "http://localhost:3000")

    # Logging
    log_level: str = "INFO"

    # Application
    app_name: str = "Walrus Site Gateway"
    app_version: str = "1.0.0"
    environment: str = "development"

    def __post_init__(self) -> None:
        if self.aggregator_url.endswith("/"):
            raise ConfigurationError("AGGREGATOR_URL must not end with a slash.")
        if self.portal_domain_name_length < 1:
            raise ConfigurationError("PORTAL_DOMAIN_NAME_LENGTH must be positive")
        # Freeze the override map so no component can mutate it
        object.__setattr__(self, "site_names", MappingProxyType(dict(self.site_names)))

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Config instance

        Raises:
            ConfigurationError: If an environment variable holds an invalid value
        """
        rpc_url = os.getenv("RPC_URL") or (_parse_list(os.getenv("RPC_URL_LIST", "")) or (None,))[0]

        try:
            return cls(
                # Networks
                sui_network=os.getenv("SUI_NETWORK", "testnet"),
                walrus_network=os.getenv("WALRUS_NETWORK", "testnet"),
                rpc_url=rpc_url or "https://fullnode.testnet.sui.io",
                aggregator_url=os.getenv("AGGREGATOR_URL", "https://aggregator.walrus-testnet.walrus.space"),
                site_package=os.getenv("SITE_PACKAGE", DEFAULT_SITE_PACKAGE),

                # Portal / resolution
                portal_domain_name_length=int(os.getenv("PORTAL_DOMAIN_NAME_LENGTH", "7")),
                portal_domain=os.getenv("PORTAL_DOMAIN") or None,
                b36_domain_resolution_support=_parse_bool(os.getenv("B36_DOMAIN_RESOLUTION_SUPPORT", "true")),
                site_names=parse_site_names(os.getenv("SITE_NAMES", "")),
                allowed_file_types=tuple(
                    ext.lower() for ext in _parse_list(os.getenv("ALLOWED_FILE_TYPES", ",".join(DEFAULT_ALLOWED_FILE_TYPES)))
                ),

                # Aggregator fetch
                fetch_max_retries=int(os.getenv("FETCH_MAX_RETRIES", "2")),
                fetch_retry_delay_ms=int(os.getenv("FETCH_RETRY_DELAY_MS", "1000")),
                verify_blob_hash=_parse_bool(os.getenv("VERIFY_BLOB_HASH", "false")),
                request_timeout=float(os.getenv("REQUEST_TIMEOUT", "10")),

                # Server
                host=os.getenv("HOST", "0.0.0.0"),
                port=int(os.getenv("PORT", "5000")),
                allowed_origins=_parse_list(
                    os.getenv("ALLOWED_ORIGINS", "http://localhost:5000,http://localhost:3000")
                ),

                # Logging
                log_level=os.getenv("LOG_LEVEL", "INFO"),

                # Application
                environment=os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV", "development"),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid configuration value: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert configuration to dictionary.

        Returns:
            Dictionary representation of configuration
        """
        return {
            "network": {
                "sui": self.sui_network,
                "walrus": self.walrus_network,
                "rpc_url": self.rpc_url,
                "aggregator_url": self.aggregator_url,
                "site_package": self.site_package,
            },
            "portal": {
                "domain_name_length": self.portal_domain_name_length,
                "domain": self.portal_domain,
                "b36_domain_resolution_support": self.b36_domain_resolution_support,
                "site_names": dict(self.site_names),
                "allowed_file_types": list(self.allowed_file_types),
            },
            "fetch": {
                "max_retries": self.fetch_max_retries,
                "retry_delay_ms": self.fetch_retry_delay_ms,
                "verify_blob_hash": self.verify_blob_hash,
                "request_timeout": self.request_timeout,
            },
            "logging": {
                "level": self.log_level,
            },
            "app": {
                "name": self.app_name,
                "version": self.app_version,
                "environment": self.environment,
            },
        }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Config instance
    """
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config() -> Config:
    """
    Reload configuration from environment variables.

    Returns:
        New Config instance
    """
    global _config
    load_dotenv()  # Reload .env file
    _config = Config.from_env()
    return _config


def set_config(config: Config) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration instance to set
    """
    global _config
    _config = config
