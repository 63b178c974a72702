"""
StateCheck — Comparator

Decides whether a decoded call result satisfies a declared expectation.
``compare`` returns normally on a match and raises CheckMismatch otherwise.

Rules, first match wins:
  1. null                        → always satisfied
  2. string that is an address   → checksum-insensitive address equality
  3. string with the bigint hint → integer equality after int(expected)
  4. other string / boolean      → strict equality
  5. list                        → deep equality, actual as a plain list
  6. mapping                     → partial struct match (see compare_struct)
  7. anything else               → strict equality

"Strict" means booleans never equal integers and strings never equal
numbers, unlike Python's own ``==``.
"""

from __future__ import annotations

from typing import Any

from statecheck.checks.errors import CheckMismatch
from statecheck.primitives.common import is_address, stringify, to_checksum
from statecheck.primitives.result import ResultTuple, to_plain_list

_MISSING = object()


def strict_equal(expected: Any, actual: Any) -> bool:
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected == actual
    if isinstance(expected, str) != isinstance(actual, str):
        return False
    return expected == actual


def deep_equal(expected: Any, actual: Any) -> bool:
    """Structural equality between a YAML-sourced value and a decoded one."""
    if isinstance(expected, list):
        if not isinstance(actual, (list, tuple)):
            return False
        if len(expected) != len(actual):
            return False
        return all(deep_equal(e, a) for e, a in zip(expected, actual))
    if isinstance(expected, dict):
        if isinstance(actual, ResultTuple):
            actual = actual.to_dict()
        if not isinstance(actual, dict) or set(map(str, expected)) != set(actual):
            return False
        return all(deep_equal(v, actual[str(k)]) for k, v in expected.items())
    return strict_equal(expected, actual)


def _fail(message: str) -> None:
    raise CheckMismatch(message)


def compare_struct(expected: dict[str, Any] | None, actual: Any) -> None:
    """
    Field-by-field match of a decoded struct against a partial mapping.

    Field counts must be equal; a null expected field matches anything.
    A decoded tuple field is compared as a plain list when a list is
    expected for it.
    """
    if expected is None:
        return

    if isinstance(actual, ResultTuple):
        actual_fields = actual.to_dict()
    elif isinstance(actual, dict):
        actual_fields = dict(actual)
    else:
        _fail(f"expected {stringify(actual)} to be a struct matching {stringify(expected)}")
        return

    message = f"expected {stringify(actual_fields)} to equal {stringify(expected)}"
    if len(actual_fields) != len(expected):
        _fail(f"{message} (field count {len(actual_fields)} != {len(expected)})")

    for field, actual_value in actual_fields.items():
        expected_value = expected.get(field, _MISSING)
        if expected_value is None:
            continue
        if expected_value is _MISSING:
            _fail(f'{message} but field "{field}" is not declared')
        if isinstance(actual_value, ResultTuple) and isinstance(expected_value, list):
            actual_value = actual_value.to_list()
        if not deep_equal(expected_value, actual_value):
            _fail(
                f'{message} but fields "{field}" differ: '
                f"{stringify(actual_value)} != {stringify(expected_value)}"
            )


def compare(expected: Any, actual: Any, *, bigint: bool = False) -> None:
    """Raise CheckMismatch unless ``actual`` satisfies ``expected``."""
    if expected is None:
        return

    if isinstance(expected, str):
        if is_address(expected):
            if not is_address(actual):
                _fail(f"expected address {expected}, got {stringify(actual)}")
            if to_checksum(actual) != to_checksum(expected):
                _fail(f"expected {to_checksum(actual)} to equal {to_checksum(expected)}")
            return
        if bigint:
            try:
                wanted = int(expected, 0) if expected.strip().lower().startswith("0x") else int(expected)
            except ValueError:
                _fail(f"expected value {expected!r} is not an integer")
                return
            if not strict_equal(wanted, actual):
                _fail(f"expected {stringify(actual)} to equal {wanted}")
            return
        if not strict_equal(expected, actual):
            _fail(f"expected {stringify(actual)} to equal {stringify(expected)}")
        return

    if isinstance(expected, bool):
        if not strict_equal(expected, actual):
            _fail(f"expected {stringify(actual)} to equal {stringify(expected)}")
        return

    if isinstance(expected, list):
        plain = to_plain_list(list(actual) if isinstance(actual, tuple) else actual)
        if not deep_equal(expected, plain):
            _fail(f"expected {stringify(actual)} to deeply equal {stringify(expected)}")
        return

    if isinstance(expected, dict):
        compare_struct(expected, actual)
        return

    if not strict_equal(expected, actual):
        _fail(f"expected {stringify(actual)} to equal {stringify(expected)}")
