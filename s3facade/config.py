"""Configuration management using TOML."""

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from loguru import logger

try:
    import tomllib
except ImportError:
    import tomli as tomllib


@dataclass
class ProviderConfig:
    """Configuration for a single storage provider."""

    name: str
    type: Literal["s3", "local", "memory"]
    enabled: bool = True

    # S3-specific fields
    endpoint: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    region: str | None = None

    # Local-specific fields
    base_path: str | None = None

    # Bucket to open, optionally scoped to a key prefix
    bucket: str | None = None
    prefix: str | None = None

    def validate(self) -> None:
        """Validate provider configuration."""
        if self.type == "s3":
            if not all([self.endpoint, self.access_key, self.secret_key]):
                raise ValueError(
                    f"S3 provider '{self.name}' missing required fields: "
                    f"endpoint, access_key, secret_key"
                )
        elif self.type == "local":
            if not self.base_path:
                raise ValueError(f"Local provider '{self.name}' missing required field: base_path")
        elif self.type != "memory":
            raise ValueError(f"Provider '{self.name}' has unknown type: {self.type}")


@dataclass
class FacadeConfig:
    """How the decorator stack and backends are set up."""

    max_retries: int = 3
    backoff_seconds: float = 1.0
    cache: bool = True
    page_size: int = 1000
    timeout_seconds: int = 300

    def validate(self) -> None:
        if self.max_retries < 0:
            raise ValueError(f"max_retries can't be negative: {self.max_retries}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive: {self.page_size}")


@dataclass
class Config:
    """Complete configuration."""

    facade: FacadeConfig
    providers: list[ProviderConfig]

    @classmethod
    def from_file(cls, config_path: str | Path = "config.toml") -> "Config":
        """Load configuration from TOML file."""
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        facade_data = data.get("facade", {})
        facade_config = FacadeConfig(
            max_retries=facade_data.get("max_retries", 3),
            backoff_seconds=facade_data.get("backoff_seconds", 1.0),
            cache=facade_data.get("cache", True),
            page_size=facade_data.get("page_size", 1000),
            timeout_seconds=facade_data.get("timeout_seconds", 300),
        )

        providers = []
        for provider_data in data.get("providers", []):
            provider = ProviderConfig(
                name=provider_data["name"],
                type=provider_data["type"],
                enabled=provider_data.get("enabled", True),
                endpoint=provider_data.get("endpoint"),
                access_key=provider_data.get("access_key"),
                secret_key=provider_data.get("secret_key"),
                region=provider_data.get("region"),
                base_path=provider_data.get("base_path"),
                bucket=provider_data.get("bucket"),
                prefix=provider_data.get("prefix"),
            )
            providers.append(provider)

        return cls(facade=facade_config, providers=providers)

    def get_enabled_providers(self) -> list[ProviderConfig]:
        """Get list of enabled providers."""
        return [p for p in self.providers if p.enabled]

    def get_provider(self, name: str) -> ProviderConfig | None:
        """Get provider by name."""
        for provider in self.providers:
            if provider.name == name:
                return provider
        return None

    def validate(self) -> None:
        """Validate settings and all enabled providers."""
        self.facade.validate()
        if not self.get_enabled_providers():
            logger.warning("No enabled providers configured")
        for provider in self.get_enabled_providers():
            provider.validate()
