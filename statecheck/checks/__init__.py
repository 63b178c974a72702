"""
StateCheck — Check Engine

Expectation model, comparator, coverage auditor, entry evaluator and
section runner. Import from the submodules directly.
"""
