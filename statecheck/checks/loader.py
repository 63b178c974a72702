"""
StateCheck — Inventory Loader

Reads the YAML state document and turns it into a validated StateDocument.
Any top-level mapping that carries "rpcUrl" or "contracts" is a network
section (conventionally "l1" and "l2"); other top-level keys are ignored.
Failures of any kind surface as InventoryError.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import ValidationError

from statecheck.checks.errors import InventoryError
from statecheck.checks.types import NetworkSection, StateDocument

logger = structlog.get_logger()

_SECTION_MARKERS = ("rpcUrl", "contracts")


def _is_section(value: Any) -> bool:
    return isinstance(value, dict) and any(k in value for k in _SECTION_MARKERS)


def _format_validation_error(key: str, error: ValidationError) -> str:
    lines = []
    for err in error.errors():
        location = ".".join(str(part) for part in (key, *err["loc"]))
        lines.append(f"  {location}: {err['msg']}")
    return "\n".join(lines)


def parse_state(raw: Any) -> StateDocument:
    """Validate an already-parsed YAML document."""
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise InventoryError("State document must be a mapping of section name to section")

    sections: dict[str, NetworkSection] = {}
    for key, value in raw.items():
        if not _is_section(value):
            logger.debug("state_key_ignored", key=key)
            continue
        try:
            sections[str(key)] = NetworkSection.model_validate(value)
        except ValidationError as e:
            raise InventoryError(
                f"Section {key!r} is malformed:\n{_format_validation_error(str(key), e)}"
            ) from e

    return StateDocument(sections=sections)


def load_state(state_file: str | Path) -> StateDocument:
    """Load and validate a state document from disk."""
    path = Path(state_file)
    if not path.is_file():
        raise InventoryError(f"State file not found: {path}")

    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InventoryError(f"State file {path} is not valid YAML: {e}") from e

    document = parse_state(raw)
    logger.info(
        "state_loaded",
        path=str(path.resolve()),
        sections=list(document.sections),
        contracts=sum(len(s.contracts) for s in document.sections.values()),
    )
    return document
