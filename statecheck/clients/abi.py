"""
StateCheck — ABI Catalog

Resolves a contract name to its ABI from a directory of compiler
artifacts. Two conventional locations are tried, in order:

  <abi_dir>/<Name>.json
  <abi_dir>/<Name>.sol/<Name>.json

An artifact may be a bare ABI array or a Hardhat/Foundry style object
with the array under "abi". Loaded ABIs are cached per name.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import structlog

from statecheck.checks.errors import AbiNotFound, ConfigError

logger = structlog.get_logger()

Abi = list[dict[str, Any]]

_MUTATING = frozenset({"payable", "nonpayable"})


def non_mutating_function_names(abi: Abi) -> list[str]:
    """
    Names of every view/pure function in ``abi``, in declaration order.

    This is the checkable surface of a contract. Overloads share a name
    and are listed once.
    """
    names: list[str] = []
    for item in abi:
        if item.get("type") != "function":
            continue
        if item.get("stateMutability") in _MUTATING:
            continue
        name = item.get("name", "")
        if name not in names:
            names.append(name)
    return names


class AbiCatalog:
    """Name → ABI lookup over an artifact directory."""

    def __init__(self, abi_dir: str | Path) -> None:
        self._abi_dir = Path(abi_dir)
        self._cache: dict[str, Abi] = {}
        self._logger = logger.bind(component="abi_catalog")

    @property
    def abi_dir(self) -> Path:
        return self._abi_dir

    def candidate_paths(self, contract_name: str) -> list[Path]:
        return [
            self._abi_dir / f"{contract_name}.json",
            self._abi_dir / f"{contract_name}.sol" / f"{contract_name}.json",
        ]

    def lookup(self, contract_name: str) -> Abi:
        """Return the ABI for ``contract_name``. Raises AbiNotFound."""
        if contract_name in self._cache:
            return self._cache[contract_name]

        path = next((p for p in self.candidate_paths(contract_name) if p.is_file()), None)
        if path is None:
            raise AbiNotFound(
                f"No ABI for {contract_name!r} in {self._abi_dir} "
                f"(tried {', '.join(str(p) for p in self.candidate_paths(contract_name))})"
            )

        try:
            artifact = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ConfigError(f"ABI artifact {path} is not valid JSON: {e}") from e

        abi = artifact.get("abi") if isinstance(artifact, dict) else artifact
        if not isinstance(abi, list):
            raise ConfigError(f"ABI artifact {path} holds no ABI array")

        self._cache[contract_name] = abi
        self._logger.debug("abi_loaded", contract=contract_name, path=str(path), items=len(abi))
        return abi
