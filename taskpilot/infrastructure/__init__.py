"""Infrastructure Layer — external service clients and cross-cutting concerns.

Invariants:
    - Infrastructure imports from core/ only for errors and protocols
    - All external calls wrapped with timeout/error mapping

Design Decisions:
    - Wrappers over raw clients: SDK and driver exceptions stop here
"""
