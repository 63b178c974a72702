"""
StateCheck — Check Report & Console Transcript

CheckReport is the single accumulator for a run: every evaluated call,
skipped check and coverage gap is recorded as a CheckOutcome, and the
failure count read at the end decides the exit status. It only grows.

ConsoleTranscript is the human-readable sink: headers per contract and
check group, one marked line per outcome, and the closing error count.
"""

from __future__ import annotations

import enum
import sys
from typing import Any, TextIO

import structlog
from pydantic import Field

from statecheck.primitives.common import StateCheckBaseModel, utc_now

logger = structlog.get_logger()

SUCCESS_MARK = "✔"
FAILURE_MARK = "✘"
WARNING_MARK = "⚠"

_RESET = "\033[0m"
_RED = "\033[31m"
_GREEN = "\033[32m"
_YELLOW = "\033[33m"
_BLUE = "\033[94m"
_MAGENTA = "\033[35m"
_GREY = "\033[90m"
_BOLD = "\033[1m"


# ─── Outcomes ─────────────────────────────────────────────────────


class OutcomeKind(enum.StrEnum):
    PASSED = "passed"
    SKIPPED = "skipped"
    EXPECTED_REVERT = "expected_revert"
    MISMATCH = "mismatch"
    UNEXPECTED_REVERT = "unexpected_revert"
    REVERT_NOT_RAISED = "revert_not_raised"
    COVERAGE_GAP = "coverage_gap"

    @property
    def failed(self) -> bool:
        return self in _FAILED_KINDS


_FAILED_KINDS = frozenset({
    OutcomeKind.MISMATCH,
    OutcomeKind.UNEXPECTED_REVERT,
    OutcomeKind.REVERT_NOT_RAISED,
    OutcomeKind.COVERAGE_GAP,
})


class CheckOutcome(StateCheckBaseModel):
    """One observable result: a call, a skipped check, or a coverage gap."""

    kind: OutcomeKind
    description: str
    observed: str = ""
    section: str = ""
    contract: str = ""
    group: str = ""
    uncovered: list[str] = Field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.kind.failed


# ─── Transcript ───────────────────────────────────────────────────


class ConsoleTranscript:
    """Writes the pass/fail transcript to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None, colors: bool | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout
        if colors is None:
            colors = bool(getattr(self._stream, "isatty", lambda: False)())
        self._colors = colors

    def _paint(self, color: str, text: str) -> str:
        return f"{color}{text}{_RESET}" if self._colors else text

    def _write(self, line: str) -> None:
        self._stream.write(line + "\n")
        self._stream.flush()

    def header1(self, text: str) -> None:
        rule = self._paint(_GREY, "=" * (len("=====  =====") + len(text)))
        middle = self._paint(_GREY, "===== ") + self._paint(_BLUE, text) + self._paint(_GREY, " =====")
        self._write(f"\n{rule}\n{middle}\n{rule}")

    def header2(self, text: str) -> None:
        self._write(
            "\n" + self._paint(_GREY, "===== ") + self._paint(_MAGENTA, text) + self._paint(_GREY, " =====")
        )

    def outcome(self, outcome: CheckOutcome) -> None:
        if outcome.kind == OutcomeKind.SKIPPED:
            self._write(f"{self._paint(_YELLOW, WARNING_MARK)} {outcome.description}: {self._paint(_YELLOW, 'skipped')}")
        elif outcome.kind == OutcomeKind.COVERAGE_GAP:
            self._write(
                f"{self._paint(_RED, FAILURE_MARK)} Section {outcome.contract} {outcome.group} "
                f"does not cover these non-mutable function from ABI: "
                f"{self._paint(_RED, ', '.join(outcome.uncovered))}"
            )
        else:
            mark = self._paint(_RED, FAILURE_MARK) if outcome.failed else self._paint(_GREEN, SUCCESS_MARK)
            self._write(f"{mark} {outcome.description}: {self._paint(_YELLOW, outcome.observed)}")

    def summary(self, error_count: int) -> None:
        if error_count:
            self._write(f"\n{self._paint(_RED, FAILURE_MARK)} {self._paint(_BOLD, f'{error_count} errors found!')}")
        else:
            self._write(f"\n{self._paint(_GREEN, SUCCESS_MARK)} {self._paint(_BOLD, 'All checks passed')}")


# ─── Report ───────────────────────────────────────────────────────


class CheckReport:
    """
    Append-only accumulator of outcomes for one run.

    Pass the same report through every section; never reset it.
    """

    def __init__(self, transcript: ConsoleTranscript | None = None) -> None:
        self._transcript = transcript
        self._outcomes: list[CheckOutcome] = []
        self.started_at = utc_now()

    @property
    def transcript(self) -> ConsoleTranscript | None:
        return self._transcript

    @property
    def outcomes(self) -> list[CheckOutcome]:
        return list(self._outcomes)

    def record(self, outcome: CheckOutcome) -> CheckOutcome:
        self._outcomes.append(outcome)
        if self._transcript is not None:
            self._transcript.outcome(outcome)
        if outcome.failed:
            logger.debug(
                "check_failed",
                kind=outcome.kind.value,
                section=outcome.section,
                contract=outcome.contract,
                group=outcome.group,
                description=outcome.description,
            )
        return outcome

    def header1(self, text: str) -> None:
        if self._transcript is not None:
            self._transcript.header1(text)

    def header2(self, text: str) -> None:
        if self._transcript is not None:
            self._transcript.header2(text)

    @property
    def error_count(self) -> int:
        return sum(1 for o in self._outcomes if o.failed)

    @property
    def exit_code(self) -> int:
        return 1 if self.error_count else 0

    def failures(self) -> list[CheckOutcome]:
        return [o for o in self._outcomes if o.failed]

    def summary(self) -> dict[str, Any]:
        counts: dict[str, int] = {kind.value: 0 for kind in OutcomeKind}
        for o in self._outcomes:
            counts[o.kind.value] += 1
        return {
            "total": len(self._outcomes),
            "errors": self.error_count,
            "started_at": self.started_at.isoformat(),
            "finished_at": utc_now().isoformat(),
            **counts,
        }
