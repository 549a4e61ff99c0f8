"""Core Layer - pure review logic: records, ledger transitions, interview scoring.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Ledger queries and mutations are pure functions over record lists
    - The interview engine is synchronous and IO-free; its locks are threading locks

Design Decisions:
    - Functional core separated from imperative shell
"""
