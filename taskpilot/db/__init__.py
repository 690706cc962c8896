"""Database Package — declarative Base for the entity store models.

Invariants:
    - All sessions are async (AsyncSession), created by infrastructure/database.py
"""
