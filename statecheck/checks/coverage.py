"""
StateCheck — Coverage Auditor

Cross-checks the methods a check group declares against the contract's
ABI. Every view/pure function without a declared check is a coverage gap.
Gaps are recorded in the report but never stop evaluation.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from statecheck.checks.report import CheckOutcome, CheckReport, OutcomeKind
from statecheck.clients.abi import AbiCatalog, non_mutating_function_names

logger = structlog.get_logger()


class CoverageAuditor:
    def __init__(self, catalog: AbiCatalog) -> None:
        self._catalog = catalog
        self._logger = logger.bind(component="coverage_auditor")

    def uncovered(self, contract_name: str, checked_methods: Iterable[str]) -> list[str]:
        """Non-mutating ABI functions of ``contract_name`` missing from ``checked_methods``."""
        checked = set(checked_methods)
        abi = self._catalog.lookup(contract_name)
        return [name for name in non_mutating_function_names(abi) if name not in checked]

    def audit(
        self,
        contract_alias: str,
        checks_label: str,
        contract_name: str,
        checked_methods: Iterable[str],
        report: CheckReport,
        section: str = "",
    ) -> list[str]:
        """Record a coverage gap for this group if any. Returns the uncovered names."""
        missing = self.uncovered(contract_name, checked_methods)
        if missing:
            self._logger.warning(
                "coverage_gap",
                section=section,
                contract=contract_alias,
                group=checks_label,
                abi=contract_name,
                uncovered=missing,
            )
            report.record(
                CheckOutcome(
                    kind=OutcomeKind.COVERAGE_GAP,
                    description=f"{contract_alias} {checks_label}",
                    observed=", ".join(missing),
                    section=section,
                    contract=contract_alias,
                    group=checks_label,
                    uncovered=missing,
                )
            )
        return missing
