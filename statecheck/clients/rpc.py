"""
StateCheck — JSON-RPC Contract Client

Read-only contract calls over a JSON-RPC endpoint via web3.py's AsyncWeb3.
One RpcClient per network section; ``bind(name, address)`` returns a
BoundContract whose ``invoke(signature, *args)`` performs an eth_call and
returns the decoded result.

Decoded values are normalised so they compare cleanly against YAML:
  - bytes / bytesN       → "0x"-prefixed lower-case hex string
  - struct (tuple)       → ResultTuple carrying the component names
  - several outputs      → ResultTuple carrying the output names
  - single output        → the value itself
Address-typed arguments are checksum-encoded and numeric strings passed
for integer parameters are converted, since web3 is strict about both.

Every call raises on revert or transport failure; callers decide what a
failure means.
"""

from __future__ import annotations

import os
from typing import Any, Protocol
from urllib.parse import urlparse

import aiohttp
import structlog
from web3 import AsyncHTTPProvider, AsyncWeb3

from statecheck.checks.errors import RpcUnavailableError
from statecheck.clients.abi import Abi, AbiCatalog
from statecheck.primitives.common import is_address, to_checksum
from statecheck.primitives.result import ResultTuple

logger = structlog.get_logger()


# ─── Protocols ────────────────────────────────────────────────────


class BoundContract(Protocol):
    async def invoke(self, signature: str, *args: Any) -> Any: ...


class ContractBinder(Protocol):
    def bind(self, contract_name: str, address: str) -> BoundContract: ...


# ─── Endpoint resolution ─────────────────────────────────────────


def is_url(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


def resolve_rpc_url(value: str) -> str | None:
    """A literal URL is used as-is; anything else names an environment variable."""
    if is_url(value):
        return value
    return os.environ.get(value) or None


# ─── ABI value normalisation ─────────────────────────────────────


def _array_element(param: dict[str, Any]) -> dict[str, Any]:
    type_ = param["type"]
    return {**param, "type": type_[: type_.rindex("[")]}


def normalize_value(param: dict[str, Any], value: Any) -> Any:
    """Normalise one decoded value according to its ABI parameter description."""
    type_ = param.get("type", "")
    if type_.endswith("]"):
        element = _array_element(param)
        return [normalize_value(element, v) for v in value]
    if type_ == "tuple":
        components = param.get("components", [])
        return ResultTuple(
            [normalize_value(c, v) for c, v in zip(components, value)],
            names=[c.get("name", "") for c in components],
        )
    if type_.startswith("bytes") and isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return value


def normalize_outputs(outputs: Abi, raw: Any) -> Any:
    """Shape a raw eth_call return the way comparisons expect it."""
    if len(outputs) == 1:
        return normalize_value(outputs[0], raw)
    values = raw if isinstance(raw, (list, tuple)) else [] if raw is None else [raw]
    return ResultTuple(
        [normalize_value(o, v) for o, v in zip(outputs, values)],
        names=[o.get("name", "") for o in outputs],
    )


def prepare_argument(param: dict[str, Any], value: Any) -> Any:
    """Coerce a YAML-sourced argument into what web3 accepts for ``param``."""
    type_ = param.get("type", "")
    if type_.endswith("]") and isinstance(value, list):
        element = _array_element(param)
        return [prepare_argument(element, v) for v in value]
    if type_ == "address" and is_address(value):
        return to_checksum(value)
    if (type_.startswith("uint") or type_.startswith("int")) and isinstance(value, str):
        text = value.strip()
        try:
            return int(text, 16) if text.lower().startswith("0x") else int(text)
        except ValueError:
            return value
    return value


# ─── Client ───────────────────────────────────────────────────────


class Web3BoundContract:
    """A contract instance at one address with one ABI."""

    def __init__(self, w3: AsyncWeb3 | None, contract_name: str, address: str, abi: Abi) -> None:
        self._w3 = w3
        self.contract_name = contract_name
        self.address = address
        self._abi = abi
        self._contract: Any = None
        if w3 is not None:
            self._contract = w3.eth.contract(address=to_checksum(address), abi=abi)

    def _function(self, signature: str) -> Any:
        if "(" in signature:
            return self._contract.get_function_by_signature(signature.replace(" ", ""))
        return self._contract.get_function_by_name(signature)

    async def invoke(self, signature: str, *args: Any) -> Any:
        if self._contract is None:
            raise RpcUnavailableError(
                f"No RPC endpoint available for {self.contract_name} at {self.address}"
            )
        fn = self._function(signature)
        inputs = fn.abi.get("inputs", [])
        prepared = [
            prepare_argument(param, value) for param, value in zip(inputs, args)
        ] + list(args[len(inputs):])
        raw = await fn(*prepared).call()
        return normalize_outputs(fn.abi.get("outputs", []), raw)


class RpcClient:
    """
    Read-only JSON-RPC client for one network section.

    An unresolved endpoint still yields a client; every call through it
    raises RpcUnavailableError so each check records a failure.
    """

    def __init__(
        self,
        rpc_url: str | None,
        catalog: AbiCatalog,
        request_timeout_s: float = 30.0,
    ) -> None:
        self._rpc_url = rpc_url
        self._catalog = catalog
        self._w3: AsyncWeb3 | None = None
        if rpc_url:
            self._w3 = AsyncWeb3(
                AsyncHTTPProvider(
                    rpc_url,
                    request_kwargs={"timeout": aiohttp.ClientTimeout(total=request_timeout_s)},
                )
            )

    @property
    def available(self) -> bool:
        return self._w3 is not None

    def bind(self, contract_name: str, address: str) -> Web3BoundContract:
        return Web3BoundContract(self._w3, contract_name, address, self._catalog.lookup(contract_name))

    async def close(self) -> None:
        if self._w3 is None:
            return
        disconnect = getattr(self._w3.provider, "disconnect", None)
        if disconnect is None:
            return
        try:
            await disconnect()
        except Exception as e:
            logger.warning("rpc_disconnect_failed", error=str(e))
