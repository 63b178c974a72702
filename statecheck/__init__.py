"""
StateCheck — declarative verification of deployed contract state.

Reads a YAML inventory of contracts and the values their view functions
are expected to return, calls every declared function over JSON-RPC and
reports each match or mismatch.
"""
