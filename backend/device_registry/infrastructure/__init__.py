"""Infrastructure Layer — cross-cutting concerns: logging and tracing.

Invariants:
    - Infrastructure never imports from core/ domain logic
"""
