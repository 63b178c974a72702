"""
Tests for the Entry Evaluator.

Covers:
  - Skip / pass / mismatch / revert outcomes per call
  - mustRevert semantics in both directions
  - Independence of checks, proxyChecks and implementationChecks
  - Non-enumerable OZ ACL checks
"""

from __future__ import annotations

from typing import Any

import pytest

from statecheck.checks.evaluator import EntryEvaluator, describe_call
from statecheck.checks.report import CheckReport, OutcomeKind
from statecheck.checks.types import ContractEntry, classify

PROXY = "0x5aAeb6053F3E94C9b9A09f33669435E7Ef1BeAed"
IMPL = "0xfB6916095ca1df60bB79Ce92cE3Ea74c37c5d359"
HOLDER = "0xdbF03B407c01E7cD3CBea99509d93f8DDDC8C6FB"
ROLE = "0x" + "00" * 32


class Reverted(Exception):
    pass


class FakeContract:
    def __init__(self, binder: FakeBinder, name: str, address: str) -> None:
        self._binder = binder
        self.name = name
        self.address = address

    async def invoke(self, signature: str, *args: Any) -> Any:
        self._binder.calls.append((self.name, self.address, signature, args))
        key = (self.address, signature, tuple(args))
        if key not in self._binder.responses:
            key = (self.address, signature)
        value = self._binder.responses.get(key, Reverted(f"no response for {signature}"))
        if isinstance(value, Exception):
            raise value
        return value


class FakeBinder:
    def __init__(self, responses: dict[tuple, Any]) -> None:
        self.responses = responses
        self.calls: list[tuple] = []

    def bind(self, contract_name: str, address: str) -> FakeContract:
        return FakeContract(self, contract_name, address)


def _make_evaluator(responses: dict[tuple, Any]) -> tuple[EntryEvaluator, FakeBinder, CheckReport]:
    binder = FakeBinder(responses)
    report = CheckReport()
    return EntryEvaluator(binder, report, section="L1"), binder, report


async def _check(responses: dict[tuple, Any], method: str, raw: Any) -> tuple[OutcomeKind, FakeBinder, CheckReport]:
    evaluator, binder, report = _make_evaluator(responses)
    contract = binder.bind("Token", PROXY)
    expectation = classify(raw)
    kind = await evaluator.evaluate_check(contract, method, expectation, alias="token", group="checks")
    return kind, binder, report


class TestDescribeCall:
    def test_without_args(self):
        assert describe_call("decimals", []) == ".decimals"

    def test_with_args(self):
        assert describe_call("balanceOf", [PROXY, 1]) == f".balanceOf({PROXY},1)"


class TestSingleCheck:
    @pytest.mark.asyncio
    async def test_null_never_calls_and_never_fails(self):
        kind, binder, report = await _check({(PROXY, "owner"): Reverted("boom")}, "owner", None)
        assert kind == OutcomeKind.SKIPPED
        assert binder.calls == []
        assert report.error_count == 0

    @pytest.mark.asyncio
    async def test_plain_value_passes(self):
        kind, _, report = await _check({(PROXY, "decimals"): 18}, "decimals", 18)
        assert kind == OutcomeKind.PASSED
        assert report.outcomes[0].observed == "18"
        assert report.error_count == 0

    @pytest.mark.asyncio
    async def test_mismatch_counts(self):
        kind, _, report = await _check({(PROXY, "decimals"): 6}, "decimals", "5")
        assert kind == OutcomeKind.MISMATCH
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_unexpected_revert_counts(self):
        kind, _, report = await _check({(PROXY, "decimals"): Reverted("execution reverted")}, "decimals", 18)
        assert kind == OutcomeKind.UNEXPECTED_REVERT
        assert report.outcomes[0].observed == "REVERTED with: execution reverted"
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_expected_revert_is_success(self):
        raw = {"args": [1], "result": None, "mustRevert": True}
        kind, _, report = await _check({(PROXY, "getItem", (1,)): Reverted("out of range")}, "getItem", raw)
        assert kind == OutcomeKind.EXPECTED_REVERT
        assert "out of range" in report.outcomes[0].observed
        assert report.error_count == 0

    @pytest.mark.asyncio
    async def test_must_revert_but_call_returns_fails(self):
        raw = {"args": [1], "result": 7, "mustRevert": True}
        kind, _, report = await _check({(PROXY, "getItem", (1,)): 7}, "getItem", raw)
        assert kind == OutcomeKind.REVERT_NOT_RAISED
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_null_result_still_calls(self):
        raw = {"args": [1], "result": None}
        kind, binder, report = await _check({(PROXY, "getItem", (1,)): Reverted("nope")}, "getItem", raw)
        assert kind == OutcomeKind.UNEXPECTED_REVERT
        assert len(binder.calls) == 1
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_signature_override(self):
        raw = {"args": [HOLDER], "result": "10", "bigint": True, "signature": "balanceOf(address)"}
        kind, binder, _ = await _check({(PROXY, "balanceOf(address)", (HOLDER,)): 10}, "balanceOf", raw)
        assert kind == OutcomeKind.PASSED
        assert binder.calls[0][2] == "balanceOf(address)"


class TestGroups:
    @pytest.mark.asyncio
    async def test_call_sequence_evaluates_each_element(self):
        evaluator, binder, report = _make_evaluator({
            (PROXY, "balanceOf", (HOLDER,)): 10,
            (PROXY, "balanceOf", (PROXY,)): 0,
        })
        entry = ContractEntry.model_validate({
            "name": "Token",
            "address": PROXY,
            "checks": {
                "balanceOf": [
                    {"args": [HOLDER], "result": 10},
                    {"args": [PROXY], "result": 1},
                ],
            },
        })
        await evaluator.evaluate_entry(entry, "token")
        assert [o.kind for o in report.outcomes] == [OutcomeKind.PASSED, OutcomeKind.MISMATCH]
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_groups_are_independent(self):
        evaluator, binder, report = _make_evaluator({
            (PROXY, "decimals"): Reverted("proxy has no decimals"),
            (PROXY, "proxy__getAdmin"): HOLDER.lower(),
            (IMPL, "decimals"): 18,
        })
        entry = ContractEntry.model_validate({
            "name": "Token",
            "proxyName": "Proxy",
            "address": PROXY,
            "implementation": IMPL,
            "checks": {"decimals": 18},
            "proxyChecks": {"proxy__getAdmin": HOLDER},
            "implementationChecks": {"decimals": 18},
        })
        await evaluator.evaluate_entry(entry, "token")

        assert [(name, address, sig) for name, address, sig, _ in binder.calls] == [
            ("Token", PROXY, "decimals"),
            ("Proxy", PROXY, "proxy__getAdmin"),
            ("Token", IMPL, "decimals"),
        ]
        assert [o.kind for o in report.outcomes] == [
            OutcomeKind.UNEXPECTED_REVERT,
            OutcomeKind.PASSED,
            OutcomeKind.PASSED,
        ]
        assert [o.group for o in report.outcomes] == ["checks", "proxyChecks", "implementationChecks"]

    @pytest.mark.asyncio
    async def test_empty_proxy_checks_skipped(self):
        evaluator, binder, report = _make_evaluator({})
        entry = ContractEntry.model_validate({
            "name": "Token",
            "proxyName": "Proxy",
            "address": PROXY,
            "proxyChecks": {},
        })
        await evaluator.evaluate_entry(entry, "token")
        assert binder.calls == []
        assert report.outcomes == []


class TestAcl:
    @pytest.mark.asyncio
    async def test_role_holders_confirmed(self):
        other = "0xD1220A0cf47c7B9Be7A2E6BA89F429762e7b9aDb"
        evaluator, binder, report = _make_evaluator({
            (PROXY, "hasRole", (ROLE, HOLDER)): True,
            (PROXY, "hasRole", (ROLE, other)): False,
        })
        entry = ContractEntry.model_validate({
            "name": "Token",
            "address": PROXY,
            "ozNonEnumerableAcl": {ROLE: [HOLDER, other]},
        })
        await evaluator.evaluate_entry(entry, "token")
        assert [o.kind for o in report.outcomes] == [OutcomeKind.PASSED, OutcomeKind.MISMATCH]
        assert report.outcomes[0].description == f".hasRole({ROLE},{HOLDER})"
        assert report.error_count == 1

    @pytest.mark.asyncio
    async def test_role_query_revert_counts(self):
        evaluator, _, report = _make_evaluator({})
        entry = ContractEntry.model_validate({
            "name": "Token",
            "address": PROXY,
            "ozNonEnumerableAcl": {ROLE: [HOLDER]},
        })
        await evaluator.evaluate_entry(entry, "token")
        assert report.outcomes[0].kind == OutcomeKind.UNEXPECTED_REVERT
        assert report.error_count == 1
