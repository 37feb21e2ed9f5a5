"""
SDK configuration.

Values come from the constructor or from environment variables via
:meth:`RegistryConfig.from_env`. Missing secrets fail eagerly with
``ConfigurationError``.
"""

import dataclasses
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from agentnft.exceptions import ConfigurationError
from agentnft.types.storage import FallbackConfig, StorageConfig

DEFAULT_INDEXER_URL = "https://indexer-storage-testnet-turbo.0g.ai"
DEFAULT_CHAIN_ID = 16601
DEFAULT_UPLOAD_TIMEOUT_MS = 10000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class RegistryConfig:
    """Everything needed to build a :class:`agentnft.registry.RegistryContext`."""

    rpc_url: str
    private_key: str
    contract_address: str
    indexer_url: str = DEFAULT_INDEXER_URL
    chain_id: int = DEFAULT_CHAIN_ID
    upload_timeout_ms: int = DEFAULT_UPLOAD_TIMEOUT_MS
    fallback: FallbackConfig = field(default_factory=FallbackConfig)

    def __repr__(self) -> str:
        return (
            f"RegistryConfig(rpc_url={self.rpc_url!r}, private_key=[REDACTED], "
            f"contract_address={self.contract_address!r}, indexer_url={self.indexer_url!r}, "
            f"chain_id={self.chain_id}, upload_timeout_ms={self.upload_timeout_ms}, "
            f"fallback={self.fallback!r})"
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RegistryConfig":
        """
        Create a config from environment variables.

        Environment variables:
            ZG_RPC_URL: Chain RPC endpoint (required)
            ZG_PRIVATE_KEY: Hex private key of the sending account (required)
            AGENT_NFT_CONTRACT_ADDRESS: Deployed contract address (required)
            ZG_INDEXER_URL: Storage indexer base URL (optional)
            ZG_CHAIN_ID: Chain id (optional, default: 16601)
            ZG_UPLOAD_TIMEOUT_MS: Per-upload timeout (optional, default: 10000)
            ZG_FALLBACK_ENABLED: Enable the local fallback tier (optional, default: true)
            ZG_LOCAL_STORAGE_DIR: Local tier root (optional, default: ./temp/local-storage)
            ZG_RETRY_ATTEMPTS: Remote upload attempts (optional, default: 1)
            ZG_RETRY_DELAY_MS: Delay between attempts (optional, default: 1000)
            ZG_PREFER_LOCAL: Skip the remote tier on writes (optional, default: false)

        Args:
            environ: Mapping to read instead of ``os.environ``

        Raises:
            ConfigurationError: If a required variable is missing or a value
                is malformed
        """
        env = os.environ if environ is None else environ

        rpc_url = _required(env, "ZG_RPC_URL")
        private_key = _required(env, "ZG_PRIVATE_KEY")
        contract_address = _required(env, "AGENT_NFT_CONTRACT_ADDRESS")

        defaults = FallbackConfig()
        fallback = FallbackConfig(
            enable_fallback=_bool(env, "ZG_FALLBACK_ENABLED", defaults.enable_fallback),
            local_storage_dir=env.get("ZG_LOCAL_STORAGE_DIR") or defaults.local_storage_dir,
            retry_attempts=_int(env, "ZG_RETRY_ATTEMPTS", defaults.retry_attempts, minimum=1),
            retry_delay_ms=_int(env, "ZG_RETRY_DELAY_MS", defaults.retry_delay_ms, minimum=0),
            prefer_local=_bool(env, "ZG_PREFER_LOCAL", defaults.prefer_local),
        )

        return cls(
            rpc_url=rpc_url,
            private_key=private_key,
            contract_address=contract_address,
            indexer_url=env.get("ZG_INDEXER_URL") or DEFAULT_INDEXER_URL,
            chain_id=_int(env, "ZG_CHAIN_ID", DEFAULT_CHAIN_ID, minimum=1),
            upload_timeout_ms=_int(env, "ZG_UPLOAD_TIMEOUT_MS", DEFAULT_UPLOAD_TIMEOUT_MS, minimum=1),
            fallback=fallback,
        )

    def storage_config(self) -> StorageConfig:
        """The storage backend's slice of this config."""
        return StorageConfig(
            rpc_url=self.rpc_url,
            indexer_url=self.indexer_url,
            chain_id=self.chain_id,
            upload_timeout_ms=self.upload_timeout_ms,
            fallback=dataclasses.replace(self.fallback),
        )


def _required(env: Mapping[str, str], name: str) -> str:
    value = env.get(name)
    if not value:
        raise ConfigurationError(f"{name} environment variable not set")
    return value


def _int(env: Mapping[str, str], name: str, default: int, minimum: int) -> int:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigurationError(f"Invalid {name}: {raw!r} is not an integer") from None
    if value < minimum:
        raise ConfigurationError(f"Invalid {name}: must be at least {minimum}, got {value}")
    return value


def _bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw == "":
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid {name}: {raw!r}. Must be 'true' or 'false'")
