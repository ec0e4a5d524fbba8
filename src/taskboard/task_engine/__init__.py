"""Task engine for the kanban board.

This package provides the task model, the in-memory store, the move/reorder
planner that keeps every status bucket densely ordered, the read-side
projector, and the seed dataset used to reset the board.
"""
