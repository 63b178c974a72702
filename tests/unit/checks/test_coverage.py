"""Tests for the Coverage Auditor."""

from __future__ import annotations

import json

from statecheck.checks.coverage import CoverageAuditor
from statecheck.checks.report import CheckReport, OutcomeKind
from statecheck.clients.abi import AbiCatalog

TOKEN_ABI = [
    {"type": "function", "name": "totalSupply", "stateMutability": "view", "inputs": [], "outputs": []},
    {"type": "function", "name": "owner", "stateMutability": "view", "inputs": [], "outputs": []},
    {"type": "function", "name": "transfer", "stateMutability": "nonpayable", "inputs": [], "outputs": []},
    {"type": "function", "name": "deposit", "stateMutability": "payable", "inputs": [], "outputs": []},
    {"type": "event", "name": "Transfer", "inputs": []},
]


def _make_auditor(tmp_path) -> CoverageAuditor:
    (tmp_path / "Token.json").write_text(json.dumps(TOKEN_ABI))
    return CoverageAuditor(AbiCatalog(tmp_path))


class TestCoverageAuditor:
    def test_reports_exactly_the_unchecked_view(self, tmp_path):
        auditor = _make_auditor(tmp_path)
        assert auditor.uncovered("Token", ["totalSupply"]) == ["owner"]

    def test_full_coverage(self, tmp_path):
        auditor = _make_auditor(tmp_path)
        assert auditor.uncovered("Token", ["totalSupply", "owner", "extra"]) == []

    def test_gap_recorded_as_error(self, tmp_path):
        auditor = _make_auditor(tmp_path)
        report = CheckReport()
        missing = auditor.audit("token", "checks", "Token", {"totalSupply": 1}.keys(), report, section="L1")
        assert missing == ["owner"]
        assert report.error_count == 1
        outcome = report.outcomes[0]
        assert outcome.kind == OutcomeKind.COVERAGE_GAP
        assert outcome.uncovered == ["owner"]
        assert outcome.group == "checks"

    def test_no_gap_records_nothing(self, tmp_path):
        auditor = _make_auditor(tmp_path)
        report = CheckReport()
        auditor.audit("token", "checks", "Token", ["totalSupply", "owner"], report)
        assert report.outcomes == []
