"""
dollar_store.config — configuration for the Dollar Store Kids local stack

Covers:
- Collection parameters (supply cap, name, symbol, base URI)
- Collateral parameters (face value per unit, stablecoin decimals/metadata)
- Vault Protocol fees (collection tax, mint tax) in native base units

Environment overrides (all optional; sensible defaults provided):

  # Collection
  DSK_MAX_UNITS=1000
  DSK_COLLECTION_NAME="Dollar Store Kids"
  DSK_COLLECTION_SYMBOL=DSK
  DSK_BASE_URI=http://localhost/

  # Collateral (1.000000 of a 6-decimal stablecoin)
  DSK_FACE_VALUE=1000000
  DSK_DECIMALS=6

  # Fees (native base units, 18 decimals)
  DSK_COLLECTION_TAX=25000000000000000
  DSK_MINT_TAX=1000000000000000

You can also load from a JSON or YAML file via `DSK_CONFIG_FILE=/path/to/config.(json|yaml|yml)`.
File values override defaults; environment overrides the file.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from dollar_store.errors import ConfigError

# -------------------------- Data classes --------------------------


@dataclass
class CollectionParams:
    """Capped collection registered once at controller construction."""
    max_units: int = 1000
    name: str = "Dollar Store Kids"
    symbol: str = "DSK"
    base_uri: str = "http://localhost/"

    def validate(self) -> None:
        if self.max_units <= 0:
            raise ConfigError(f"max_units must be positive (got {self.max_units}).")
        if not self.name or not self.symbol:
            raise ConfigError("collection name and symbol must be non-empty.")


@dataclass
class CollateralParams:
    """Reference stablecoin and the amount escrowed behind each unit."""
    face_value: int = 1_000_000   # 1.000000 at 6 decimals
    decimals: int = 6
    token_name: str = "USD Coin"
    token_symbol: str = "USDC"

    def validate(self) -> None:
        if self.face_value <= 0:
            raise ConfigError(f"face_value must be positive (got {self.face_value}).")
        if not (0 <= self.decimals <= 36):
            raise ConfigError(f"decimals must be between 0 and 36 (got {self.decimals}).")


@dataclass
class FeeParams:
    """Vault Protocol fees, paid in native currency (18-decimal base units)."""
    collection_tax: int = 25_000_000_000_000_000   # 0.025
    mint_tax: int = 1_000_000_000_000_000          # 0.001

    def validate(self) -> None:
        if self.collection_tax < 0 or self.mint_tax < 0:
            raise ConfigError("taxes must be non-negative.")


@dataclass
class Config:
    """Top-level configuration container."""
    collection: CollectionParams = field(default_factory=CollectionParams)
    collateral: CollateralParams = field(default_factory=CollateralParams)
    fees: FeeParams = field(default_factory=FeeParams)

    def validate(self) -> None:
        self.collection.validate()
        self.collateral.validate()
        self.fees.validate()

    @property
    def max_collateral(self) -> int:
        return self.collection.max_units * self.collateral.face_value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# -------------------------- Loaders --------------------------


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    try:
        return int(str(v).replace("_", ""))
    except ValueError as e:
        raise ConfigError(f"Invalid int for {name}: {v!r}") from e


def _getenv_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None or v == "" else v


def from_env(base: Optional[Config] = None, prefix: str = "DSK_") -> Config:
    """
    Build a Config from environment variables, optionally layering on top of `base`.
    """
    cfg = base or Config()

    new_cfg = Config(
        collection=CollectionParams(
            max_units=_getenv_int(f"{prefix}MAX_UNITS", cfg.collection.max_units),
            name=_getenv_str(f"{prefix}COLLECTION_NAME", cfg.collection.name),
            symbol=_getenv_str(f"{prefix}COLLECTION_SYMBOL", cfg.collection.symbol),
            base_uri=_getenv_str(f"{prefix}BASE_URI", cfg.collection.base_uri),
        ),
        collateral=CollateralParams(
            face_value=_getenv_int(f"{prefix}FACE_VALUE", cfg.collateral.face_value),
            decimals=_getenv_int(f"{prefix}DECIMALS", cfg.collateral.decimals),
            token_name=cfg.collateral.token_name,
            token_symbol=cfg.collateral.token_symbol,
        ),
        fees=FeeParams(
            collection_tax=_getenv_int(f"{prefix}COLLECTION_TAX", cfg.fees.collection_tax),
            mint_tax=_getenv_int(f"{prefix}MINT_TAX", cfg.fees.mint_tax),
        ),
    )
    new_cfg.validate()
    return new_cfg


def from_file(path: str | os.PathLike[str]) -> Config:
    """
    Load configuration from a JSON or YAML file. Missing keys keep their defaults.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(p)

    text = p.read_text(encoding="utf-8")
    try:
        if p.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = json.loads(text or "{}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{p}: top-level value must be a mapping")

    try:
        cfg = Config(
            collection=CollectionParams(**data.get("collection", {})),
            collateral=CollateralParams(**data.get("collateral", {})),
            fees=FeeParams(**data.get("fees", {})),
        )
    except TypeError as e:
        raise ConfigError(f"{p}: {e}") from e
    cfg.validate()
    return cfg


def load() -> Config:
    """
    Load configuration using the following precedence:
      1) File at $DSK_CONFIG_FILE (JSON/YAML)
      2) Environment variables (DSK_*), applied on top of defaults or file values
    """
    file_path = os.getenv("DSK_CONFIG_FILE")
    base = from_file(file_path) if file_path else Config()
    return from_env(base=base)


@lru_cache(maxsize=1)
def load_config() -> Config:
    """Cached `load()`; call `load_config.cache_clear()` after changing the environment."""
    return load()


# -------------------------- Utilities --------------------------


def pretty(cfg: Optional[Config] = None) -> str:
    """Return a human-readable JSON string of the current config."""
    obj = (cfg or load()).to_dict()
    return json.dumps(obj, indent=2, sort_keys=True)


__all__ = [
    "CollectionParams",
    "CollateralParams",
    "FeeParams",
    "Config",
    "from_env",
    "from_file",
    "load",
    "load_config",
    "pretty",
]
