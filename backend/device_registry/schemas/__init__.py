"""Pydantic Schemas — wire shapes of devices, credentials and inbound messages.

Invariants:
    - Schemas validate at system boundary (request payloads, message metadata)
    - Wire names are aliases; Python code uses snake_case field names
"""
