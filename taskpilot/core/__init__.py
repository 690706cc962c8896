"""Core Layer — pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic (the context store holds
      in-memory state only)

Design Decisions:
    - Functional core separated from imperative shell; the store is reached
      through repository_protocols.EntityStore
"""
