"""
StateCheck — External Service Clients

ABI artifact lookup and the JSON-RPC contract client.
"""
