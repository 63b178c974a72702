"""
StateCheck — Check Type Definitions

The parsed form of a state inventory: network sections, contract entries,
and the expectation declared for each checked method.

Every declared check value is classified exactly once, at load time, into
one of four variants:

  Skip          null; acknowledged but never called
  PlainValue    anything that is not an argumented call
  ArgCall       a mapping with BOTH "args" and "result" keys
  CallSequence  a list; each element is classified on its own and
                evaluated as a separate call to the same method

A plain mapping that happens to carry both "args" and "result" is read as
an ArgCall. There is no escape for that case.
"""

from __future__ import annotations

import enum
from typing import Any, ClassVar, Union

from pydantic import Field, field_validator, model_validator

from statecheck.primitives.common import StateCheckBaseModel, is_address

# ─── Enums ────────────────────────────────────────────────────────


class ExpectationKind(enum.StrEnum):
    SKIP = "skip"
    PLAIN = "plain"
    ARG_CALL = "arg_call"
    CALL_SEQUENCE = "call_sequence"


class CheckGroup(enum.StrEnum):
    """The three check groups a contract entry can declare."""

    CHECKS = "checks"
    PROXY_CHECKS = "proxyChecks"
    IMPLEMENTATION_CHECKS = "implementationChecks"


# ─── Expectations ─────────────────────────────────────────────────


class Skip(StateCheckBaseModel):
    kind: ClassVar[ExpectationKind] = ExpectationKind.SKIP


class PlainValue(StateCheckBaseModel):
    """A bare expected value for a zero-argument call."""

    kind: ClassVar[ExpectationKind] = ExpectationKind.PLAIN

    value: Any


class ArgCall(StateCheckBaseModel):
    """A call with explicit arguments and optional revert/signature/integer hints."""

    kind: ClassVar[ExpectationKind] = ExpectationKind.ARG_CALL

    args: list[Any] = Field(default_factory=list)
    result: Any = None
    must_revert: bool = Field(default=False, alias="mustRevert")
    signature: str | None = None
    bigint: bool = False

    @field_validator("args", mode="before")
    @classmethod
    def _wrap_scalar_args(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            return [v]
        return v

    def resolved_signature(self, method: str) -> str:
        return self.signature or method


SingleCall = Union[ArgCall, PlainValue, Skip]


class CallSequence(StateCheckBaseModel):
    """Several calls to one method key, each with its own expectation."""

    kind: ClassVar[ExpectationKind] = ExpectationKind.CALL_SEQUENCE

    items: list[SingleCall] = Field(default_factory=list)


Expectation = Union[ArgCall, PlainValue, Skip, CallSequence]


def classify_single(raw: Any) -> SingleCall:
    if raw is None:
        return Skip()
    if isinstance(raw, dict) and "args" in raw and "result" in raw:
        return ArgCall.model_validate(raw)
    return PlainValue(value=raw)


def classify(raw: Any) -> Expectation:
    """Turn one declared check value into its expectation variant."""
    if isinstance(raw, list):
        return CallSequence(items=[classify_single(item) for item in raw])
    return classify_single(raw)


def calls_of(expectation: Expectation) -> list[SingleCall]:
    """The individual calls an expectation stands for, in order."""
    if isinstance(expectation, CallSequence):
        return list(expectation.items)
    return [expectation]


# ─── Inventory ────────────────────────────────────────────────────


Checks = dict[str, Expectation]


class ContractEntry(StateCheckBaseModel):
    """One deployed contract under test, optionally a proxy/implementation pair."""

    name: str
    address: str
    checks: Checks | None = None

    proxy_name: str | None = Field(default=None, alias="proxyName")
    implementation: str | None = None
    proxy_checks: Checks | None = Field(default=None, alias="proxyChecks")
    implementation_checks: Checks | None = Field(default=None, alias="implementationChecks")

    # role → holders expected to have it, confirmed one by one via hasRole
    oz_non_enumerable_acl: dict[str, list[str]] | None = Field(
        default=None, alias="ozNonEnumerableAcl"
    )

    @field_validator("checks", "proxy_checks", "implementation_checks", mode="before")
    @classmethod
    def _classify_checks(cls, v: Any) -> Any:
        if v is None:
            return None
        if not isinstance(v, dict):
            raise ValueError("checks must be a mapping of method name to expected value")
        return {str(method): classify(raw) for method, raw in v.items()}

    @field_validator("address", "implementation")
    @classmethod
    def _valid_address(cls, v: str | None) -> str | None:
        if v is not None and not is_address(v):
            raise ValueError(f"{v} is invalid address")
        return v

    @model_validator(mode="after")
    def _proxy_fields_consistent(self) -> ContractEntry:
        if self.implementation_checks is not None and self.implementation is None:
            raise ValueError("implementationChecks declared without implementation address")
        if self.proxy_checks is not None and self.proxy_name is None:
            raise ValueError("proxyChecks declared without proxyName")
        return self

    def declared_groups(self) -> list[tuple[CheckGroup, str, Checks]]:
        """(group, contract name for ABI lookup, checks) for every declared group."""
        groups: list[tuple[CheckGroup, str, Checks]] = []
        if self.checks is not None:
            groups.append((CheckGroup.CHECKS, self.name, self.checks))
        if self.proxy_checks is not None and self.proxy_name is not None:
            groups.append((CheckGroup.PROXY_CHECKS, self.proxy_name, self.proxy_checks))
        if self.implementation_checks is not None:
            groups.append((CheckGroup.IMPLEMENTATION_CHECKS, self.name, self.implementation_checks))
        return groups


class NetworkSection(StateCheckBaseModel):
    """One chain's worth of entries, sharing one RPC endpoint."""

    # Literal URL, or the name of an environment variable holding one
    rpc_url: str = Field(alias="rpcUrl")
    contracts: dict[str, ContractEntry] = Field(default_factory=dict)

    @field_validator("contracts", mode="before")
    @classmethod
    def _empty_contracts(cls, v: Any) -> Any:
        return {} if v is None else v


class StateDocument(StateCheckBaseModel):
    """All network sections of an inventory, in document order."""

    sections: dict[str, NetworkSection] = Field(default_factory=dict)

    def contract_names(self) -> list[str]:
        """Every contract name whose ABI a full run needs."""
        names: list[str] = []
        for section in self.sections.values():
            for entry in section.contracts.values():
                for _, contract_name, _ in entry.declared_groups():
                    if contract_name not in names:
                        names.append(contract_name)
                if entry.oz_non_enumerable_acl and entry.name not in names:
                    names.append(entry.name)
        return names
