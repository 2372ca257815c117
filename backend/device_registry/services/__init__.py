"""Services Layer — management request handlers and the reference registry service.

Invariants:
    - Handlers depend on service Protocols (core/service_protocols), not implementations
"""
