"""Registry configuration — deployment identity, treasury and pricing.

Loaded from a JSON file (config/registry.json) or from LAZYMINT_*
environment variables, with an optional .env file read through
python-dotenv. Values are validated on load; an invalid config raises
ValueError before any registry is built.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from lazymint.addresses import canonical_address
from lazymint.crypto.voucher import DOMAIN_NAME, DOMAIN_VERSION
from lazymint.models.registry import require_uint256

DEFAULT_MINIMUM_PRICE = 25_000_000_000_000_000  # 0.025 ether
DEFAULT_URI_PREFIX = "ipfs://"

ENV_PREFIX = "LAZYMINT_"

# config field -> environment variable suffix
_ENV_FIELDS: dict[str, str] = {
    "name": "NAME",
    "symbol": "SYMBOL",
    "domain_name": "DOMAIN_NAME",
    "domain_version": "DOMAIN_VERSION",
    "chain_id": "CHAIN_ID",
    "contract_address": "CONTRACT_ADDRESS",
    "treasury_address": "TREASURY_ADDRESS",
    "uri_prefix": "URI_PREFIX",
    "initial_minimum_price": "MINIMUM_PRICE",
}
_INT_FIELDS = {"chain_id", "initial_minimum_price"}


@dataclass(frozen=True)
class RegistryConfig:
    """Static parameters of one registry deployment.

    contract_address and chain_id feed the voucher signing domain;
    treasury_address is the only withdrawal destination.
    """
    chain_id: int
    contract_address: str
    treasury_address: str
    name: str = "PoignART"
    symbol: str = "PART"
    domain_name: str = DOMAIN_NAME
    domain_version: str = DOMAIN_VERSION
    uri_prefix: str = DEFAULT_URI_PREFIX
    initial_minimum_price: int = DEFAULT_MINIMUM_PRICE

    def __post_init__(self) -> None:
        require_uint256("chain_id", self.chain_id)
        require_uint256("initial_minimum_price", self.initial_minimum_price)
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "contract_address", canonical_address(self.contract_address))
        object.__setattr__(self, "treasury_address", canonical_address(self.treasury_address))
        if not self.domain_name:
            raise ValueError("domain_name must not be empty")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RegistryConfig:
        unknown = set(data) - set(_ENV_FIELDS)
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")
        missing = {"chain_id", "contract_address", "treasury_address"} - set(data)
        if missing:
            raise ValueError(f"Missing config keys: {sorted(missing)}")
        return cls(**data)

    @classmethod
    def from_file(cls, path: Path) -> RegistryConfig:
        """Load a JSON config file."""
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be an object: {path}")
        return cls.from_dict(data)

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None) -> RegistryConfig:
        """Load from LAZYMINT_* variables, reading env_file first if given.

        Variables already set in the process environment win over the file.
        """
        if env_file is not None:
            load_dotenv(env_file)
        data: dict[str, Any] = {}
        for field_name, suffix in _ENV_FIELDS.items():
            raw = os.getenv(ENV_PREFIX + suffix)
            if raw is None:
                continue
            if field_name in _INT_FIELDS:
                try:
                    data[field_name] = int(raw, 0)
                except ValueError:
                    raise ValueError(f"{ENV_PREFIX}{suffix} must be an integer: {raw!r}") from None
            else:
                data[field_name] = raw
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
