"""API Layer - thin FastAPI adapter over the review coordinator.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return the ReviewOutcome JSON shape

Design Decisions:
    - Thin routes delegate to ReviewCoordinator; no review rule lives here
"""
