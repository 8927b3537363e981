"""
Client-side board state for Lanes.

The board applies drag-and-drop moves optimistically, sends the move to the
server, then either re-fetches the authoritative order or restores the
exact pre-move snapshot.
"""

from lanes.client.api import ApiError, LanesClient
from lanes.client.board import BoardSession, MoveOutcome
from lanes.client.reconcile import DropTarget, apply_move, column_tasks, hovered_column, resolve_drop_target

__all__ = [
    "ApiError",
    "LanesClient",
    "BoardSession",
    "MoveOutcome",
    "DropTarget",
    "apply_move",
    "column_tasks",
    "hovered_column",
    "resolve_drop_target",
]
