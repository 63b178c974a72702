"""
StateCheck -- Error Hierarchy

All exceptions raised by the check engine.

ConfigError and its subclasses are fatal: they surface before any section
is evaluated and terminate the run. Everything else is caught at the
point of occurrence by the evaluator and folded into the CheckReport;
nothing non-fatal propagates past an entry.
"""

from __future__ import annotations


class StateCheckError(RuntimeError):
    """Base for all state-check errors."""


class ConfigError(StateCheckError):
    """Malformed inventory or missing artifact. Aborts the run."""


class InventoryError(ConfigError):
    """The state document failed structural validation."""


class AbiNotFound(ConfigError):
    """No ABI artifact for a contract name under either lookup location."""


class CheckMismatch(StateCheckError):
    """A call succeeded but its decoded result disagrees with the declared expectation."""


class RpcUnavailableError(StateCheckError):
    """The section's RPC endpoint could not be resolved. Every call through it fails."""
