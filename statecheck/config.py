"""
StateCheck — Configuration System

All configuration is Pydantic-validated and loaded from:
1. A YAML config file (optional)
2. Environment variables (overrides, STATECHECK_ prefix)
3. Command-line arguments (applied by main on top of both)

The state inventory itself is NOT configuration; see checks/loader.py.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# ─── Sub-configs ──────────────────────────────────────────────────


class RpcConfig(BaseModel):
    request_timeout_s: float = 30.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "console"  # "console" | "json"


# ─── Root Config ──────────────────────────────────────────────────


class CheckerConfig(BaseSettings):
    """
    Root configuration. Loads from YAML, overridable by env vars.
    """

    model_config = SettingsConfigDict(
        env_prefix="STATECHECK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Directory holding <Name>.json or <Name>.sol/<Name>.json artifacts
    abi_dir: Path = Path("abi")

    # Section keys to evaluate; empty means every section in the document.
    # From the environment as JSON: STATECHECK_SECTIONS='["l1"]'
    sections: list[str] = Field(default_factory=list)

    rpc: RpcConfig = Field(default_factory=RpcConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: str | Path | None = None) -> CheckerConfig:
    """
    Load configuration from YAML file, then apply environment variable overrides.
    """
    raw: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                raw = yaml.safe_load(f) or {}

    if abi_dir := os.environ.get("STATECHECK_ABI_DIR"):
        raw["abi_dir"] = abi_dir
    if timeout := os.environ.get("STATECHECK_RPC__REQUEST_TIMEOUT_S"):
        raw.setdefault("rpc", {})["request_timeout_s"] = float(timeout)
    if level := os.environ.get("STATECHECK_LOGGING__LEVEL"):
        raw.setdefault("logging", {})["level"] = level
    if fmt := os.environ.get("STATECHECK_LOGGING__FORMAT"):
        raw.setdefault("logging", {})["format"] = fmt

    return CheckerConfig(**raw)
