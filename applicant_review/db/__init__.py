"""Database Infrastructure - SQLAlchemy declarative base.

Invariants:
    - One DatabaseSessionManager (and async engine) per app, created in the lifespan
    - All sessions are async (AsyncSession)
"""
