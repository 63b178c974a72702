"""
StateCheck — Section Runner

Evaluates every contract entry of one network section over one RPC
connection, in declaration order. For each entry the coverage audit of
every declared group runs first, then the entry's checks. The runner is
exhaustive: a failing entry never stops the ones after it.
"""

from __future__ import annotations

from collections.abc import Callable

import structlog

from statecheck.checks.coverage import CoverageAuditor
from statecheck.checks.evaluator import EntryEvaluator
from statecheck.checks.report import CheckReport
from statecheck.checks.types import NetworkSection
from statecheck.clients.abi import AbiCatalog
from statecheck.clients.rpc import ContractBinder, RpcClient, resolve_rpc_url

logger = structlog.get_logger()

ClientFactory = Callable[[str | None], ContractBinder]


class SectionRunner:
    def __init__(
        self,
        catalog: AbiCatalog,
        request_timeout_s: float = 30.0,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._catalog = catalog
        self._auditor = CoverageAuditor(catalog)
        self._request_timeout_s = request_timeout_s
        self._client_factory = client_factory or self._default_client

    def _default_client(self, rpc_url: str | None) -> ContractBinder:
        return RpcClient(rpc_url, self._catalog, request_timeout_s=self._request_timeout_s)

    async def run_section(self, section: NetworkSection, label: str, report: CheckReport) -> None:
        log = logger.bind(component="section_runner", section=label)

        rpc_url = resolve_rpc_url(section.rpc_url)
        if rpc_url is None:
            log.warning("rpc_url_unresolved", rpc_url_env=section.rpc_url)
        client = self._client_factory(rpc_url)

        log.info("section_started", contracts=len(section.contracts))
        errors_before = report.error_count
        evaluator = EntryEvaluator(client, report, section=label)
        try:
            for alias, entry in section.contracts.items():
                report.header1(f"Contract ({label}): {alias} ({entry.name}, {entry.address})")

                for group, contract_name, checks in entry.declared_groups():
                    self._auditor.audit(alias, group.value, contract_name, checks.keys(), report, section=label)

                await evaluator.evaluate_entry(entry, alias)
        finally:
            close = getattr(client, "close", None)
            if close is not None:
                await close()

        log.info("section_finished", errors=report.error_count - errors_before)
