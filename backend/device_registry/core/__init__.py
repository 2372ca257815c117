"""Core Layer — domain rules, codecs and boundary protocols, no IO, no transport.

Invariants:
    - core/ imports only from core/ and schemas/, never from services/, api/
      or infrastructure/
    - Codecs and enforcement functions are pure and synchronous; failures are
      raised as classified errors (core/errors.py)
    - service_protocols declares the async contracts implemented in services/
"""
