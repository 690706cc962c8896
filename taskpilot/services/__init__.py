"""Services Layer — operation handlers, dispatch, interpreter, reconciler.

Invariants:
    - Handlers split by concern (task fields, apartment assignments)
    - Tool dispatch uses explicit dict mapping (no auto-discovery)

Design Decisions:
    - One handler file per concern for locality
"""
