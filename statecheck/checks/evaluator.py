"""
StateCheck — Entry Evaluator

Runs every declared check of one contract entry against live contracts.

Groups are evaluated in order and independently of each other:
  checks                (name,      address)
  proxyChecks           (proxyName, address)         skipped when empty
  implementationChecks  (name,      implementation)
followed by the non-enumerable OZ ACL checks at (name, address).

Per call there are exactly these outcomes:
  call returned, mustRevert unset, comparator agrees    → passed
  call returned, mustRevert unset, comparator disagrees → mismatch
  call returned, mustRevert set                         → revert_not_raised
  call raised,   mustRevert set                         → expected_revert
  call raised,   mustRevert unset                       → unexpected_revert
A top-level null is never called and is recorded as skipped.
"""

from __future__ import annotations

from typing import Any

import structlog

from statecheck.checks.comparator import compare
from statecheck.checks.errors import CheckMismatch
from statecheck.checks.report import CheckOutcome, CheckReport, OutcomeKind
from statecheck.checks.types import (
    ArgCall,
    CheckGroup,
    Checks,
    ContractEntry,
    SingleCall,
    Skip,
    calls_of,
)
from statecheck.clients.rpc import BoundContract, ContractBinder
from statecheck.primitives.common import stringify

logger = structlog.get_logger()

ACL_HEADER = "Non-enumerable OZ Acl checks"


def describe_call(signature: str, args: list[Any]) -> str:
    """Transcript label for a call: ``.signature(arg1,arg2)``, no parens without args."""
    args_str = f"({','.join(stringify(a) for a in args)})" if args else ""
    return f".{signature}{args_str}"


class EntryEvaluator:
    """Evaluates contract entries through a ContractBinder, recording into a CheckReport."""

    def __init__(self, binder: ContractBinder, report: CheckReport, section: str = "") -> None:
        self._binder = binder
        self._report = report
        self._section = section
        self._logger = logger.bind(component="entry_evaluator", section=section)

    # ─── Entry ────────────────────────────────────────────────────

    async def evaluate_entry(self, entry: ContractEntry, alias: str = "") -> None:
        alias = alias or entry.name

        if entry.checks is not None:
            self._report.header2(CheckGroup.CHECKS.value)
            await self.evaluate_group(entry.name, entry.address, entry.checks, alias, CheckGroup.CHECKS)

        if entry.proxy_checks and entry.proxy_name is not None:
            self._report.header2(CheckGroup.PROXY_CHECKS.value)
            await self.evaluate_group(
                entry.proxy_name, entry.address, entry.proxy_checks, alias, CheckGroup.PROXY_CHECKS
            )

        if entry.implementation_checks is not None and entry.implementation is not None:
            self._report.header2(CheckGroup.IMPLEMENTATION_CHECKS.value)
            await self.evaluate_group(
                entry.name,
                entry.implementation,
                entry.implementation_checks,
                alias,
                CheckGroup.IMPLEMENTATION_CHECKS,
            )

        if entry.oz_non_enumerable_acl:
            self._report.header2(ACL_HEADER)
            await self.evaluate_acl(entry.name, entry.address, entry.oz_non_enumerable_acl, alias)

    # ─── Groups ───────────────────────────────────────────────────

    async def evaluate_group(
        self,
        contract_name: str,
        address: str,
        checks: Checks,
        alias: str,
        group: CheckGroup,
    ) -> None:
        contract = self._binder.bind(contract_name, address)
        for method, expectation in checks.items():
            for call in calls_of(expectation):
                await self.evaluate_check(contract, method, call, alias=alias, group=group.value)

    async def evaluate_acl(
        self,
        contract_name: str,
        address: str,
        acl: dict[str, list[str]],
        alias: str,
    ) -> None:
        contract = self._binder.bind(contract_name, address)
        for role, holders in acl.items():
            for holder in holders:
                description = describe_call("hasRole", [role, holder])
                try:
                    has_role = await contract.invoke("hasRole", role, holder)
                except Exception as e:
                    self._record(OutcomeKind.UNEXPECTED_REVERT, description, f"REVERTED with: {e}", alias, ACL_HEADER)
                    continue
                kind = OutcomeKind.PASSED if has_role is True else OutcomeKind.MISMATCH
                self._record(kind, description, stringify(has_role), alias, ACL_HEADER)

    # ─── Single check ─────────────────────────────────────────────

    async def evaluate_check(
        self,
        contract: BoundContract,
        method: str,
        call: SingleCall,
        alias: str = "",
        group: str = "",
    ) -> OutcomeKind:
        if isinstance(call, Skip):
            self._record(OutcomeKind.SKIPPED, f".{method}", "skipped", alias, group)
            return OutcomeKind.SKIPPED

        if isinstance(call, ArgCall):
            args = list(call.args)
            expected = call.result
            must_revert = call.must_revert
            signature = call.resolved_signature(method)
            bigint = call.bigint
        else:
            args = []
            expected = call.value
            must_revert = False
            signature = method
            bigint = False

        description = describe_call(signature, args)

        try:
            actual = await contract.invoke(signature, *args)
        except Exception as e:
            observed = f"REVERTED with: {e}"
            kind = OutcomeKind.EXPECTED_REVERT if must_revert else OutcomeKind.UNEXPECTED_REVERT
            if not must_revert:
                self._logger.info(
                    "call_failed",
                    contract=alias,
                    call=description,
                    error_type=type(e).__name__,
                    error=str(e)[:500],
                )
            self._record(kind, description, observed, alias, group)
            return kind

        if must_revert:
            self._record(
                OutcomeKind.REVERT_NOT_RAISED,
                description,
                f"expected revert, but call returned {stringify(actual)}",
                alias,
                group,
            )
            return OutcomeKind.REVERT_NOT_RAISED

        try:
            compare(expected, actual, bigint=bigint)
        except CheckMismatch as e:
            self._record(OutcomeKind.MISMATCH, description, f"{stringify(actual)} ({e})", alias, group)
            return OutcomeKind.MISMATCH

        self._record(OutcomeKind.PASSED, description, stringify(actual), alias, group)
        return OutcomeKind.PASSED

    def _record(self, kind: OutcomeKind, description: str, observed: str, alias: str, group: str) -> None:
        self._report.record(
            CheckOutcome(
                kind=kind,
                description=description,
                observed=observed,
                section=self._section,
                contract=alias,
                group=group,
            )
        )
