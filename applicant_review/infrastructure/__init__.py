"""Infrastructure Layer - storage, grant delivery and cross-cutting concerns.

Invariants:
    - Infrastructure implements the protocols in core/repository_protocols.py
    - All external calls wrapped with timeout/error mapping

Design Decisions:
    - Thin adapters over SQLAlchemy and httpx; no review rules live here
"""
