"""Services Layer - ledger store, review coordinator and side effect execution.

Invariants:
    - The coordinator returns side effects as data; SideEffectRunner performs them
    - Event dispatch uses an explicit dict mapping (no auto-discovery)
"""
