"""Device Registry Package — management API core for devices and credentials.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
