"""
StateCheck — Check Service

Top of the check engine. Selects the sections to run, verifies up front
that every ABI the run needs exists (so a missing artifact aborts before
any call is made), then runs the sections one after another into a
single CheckReport.
"""

from __future__ import annotations

import structlog

from statecheck.checks.errors import ConfigError
from statecheck.checks.report import CheckReport, ConsoleTranscript
from statecheck.checks.runner import ClientFactory, SectionRunner
from statecheck.checks.types import StateDocument
from statecheck.clients.abi import AbiCatalog
from statecheck.config import CheckerConfig

logger = structlog.get_logger()


class StateCheckService:
    def __init__(
        self,
        config: CheckerConfig,
        transcript: ConsoleTranscript | None = None,
        client_factory: ClientFactory | None = None,
    ) -> None:
        self._config = config
        self._transcript = transcript
        self._catalog = AbiCatalog(config.abi_dir)
        self._runner = SectionRunner(
            self._catalog,
            request_timeout_s=config.rpc.request_timeout_s,
            client_factory=client_factory,
        )
        self._logger = logger.bind(component="state_check_service")

    @property
    def catalog(self) -> AbiCatalog:
        return self._catalog

    def select(self, document: StateDocument) -> StateDocument:
        """Restrict ``document`` to the configured sections, keeping document order."""
        wanted = self._config.sections
        if not wanted:
            return document
        unknown = [key for key in wanted if key not in document.sections]
        if unknown:
            raise ConfigError(
                f"Unknown section(s) {', '.join(unknown)}; document has {', '.join(document.sections) or 'none'}"
            )
        return StateDocument(
            sections={key: s for key, s in document.sections.items() if key in wanted}
        )

    def preflight(self, document: StateDocument) -> None:
        """Load every ABI the run needs. Raises AbiNotFound on the first missing one."""
        for contract_name in document.contract_names():
            self._catalog.lookup(contract_name)

    async def run(self, document: StateDocument) -> CheckReport:
        document = self.select(document)
        self.preflight(document)

        report = CheckReport(self._transcript)
        for key, section in document.sections.items():
            await self._runner.run_section(section, key.upper(), report)

        if self._transcript is not None:
            self._transcript.summary(report.error_count)
        self._logger.info("run_complete", **report.summary())
        return report
