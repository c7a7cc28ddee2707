"""Application configuration using pydantic-settings.

Holds the Ethereum RPC endpoint, the Uniswap V2 factory address and the
HTTP server options.
"""

from functools import lru_cache
from urllib.parse import urlsplit, urlunsplit

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Uniswap V2 factory on Ethereum mainnet
DEFAULT_FACTORY_ADDRESS = "0x5C69bEe701ef814a2B6a3EDD4B1652CB9cc5aA6f"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Ethereum
    # ======================
    ethereum_rpc_url: str = Field(
        default="https://eth.llamarpc.com", description="Ethereum JSON-RPC URL"
    )
    rpc_timeout: float = Field(default=15.0, description="RPC request timeout in seconds")

    # ======================
    # Uniswap
    # ======================
    uniswap_v2_factory_address: str = Field(
        default=DEFAULT_FACTORY_ADDRESS, description="Uniswap V2 factory contract address"
    )

    # ======================
    # Gas price cache
    # ======================
    gas_price_cache_ttl_ms: int = Field(
        default=10_000, ge=0, description="Gas price cache lifetime in milliseconds"
    )
    warm_gas_price_cache: bool = Field(
        default=True, description="Fetch the gas price once on startup"
    )

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    port: int = Field(default=3000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug mode")

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings dict with secrets redacted."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "api_host": self.api_host,
            "port": self.port,
            "ethereum_rpc_url": self._redact_url(self.ethereum_rpc_url),
            "rpc_timeout": self.rpc_timeout,
            "uniswap_v2_factory_address": self.uniswap_v2_factory_address,
            "gas_price_cache_ttl_ms": self.gas_price_cache_ttl_ms,
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact credentials and API keys from an RPC URL.

        Hosted providers put the key in the path (``/v3/<key>``) or the query
        string, so only scheme and host are kept.
        """
        if not url or "://" not in url:
            return url
        parts = urlsplit(url)
        host = parts.hostname or ""
        if parts.port:
            host = f"{host}:{parts.port}"
        redacted_path = "/***" if parts.path.strip("/") else parts.path
        return urlunsplit((parts.scheme, host, redacted_path, "***" if parts.query else "", ""))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
