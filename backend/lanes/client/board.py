"""
Optimistic drag-and-drop board session.

Drag callbacks run synchronously on the UI loop; only the server call is
awaited. A drop:

1. snapshots the current task list
2. applies the move locally (lanes.client.reconcile.apply_move)
3. sends the move to the server
4. on success re-fetches the board, since the server recomputes the
   neighbours' positions; on failure restores the snapshot unchanged

Drops can overlap when the network is slow. A snapshot is only trusted if
its drop is still the newest one and no other drop was in flight at any
point while it was pending; otherwise a failure re-fetches the board
instead of restoring state that mixes in another drop's optimistic move.
"""

import uuid
from enum import Enum

import httpx

from lanes.client.api import ApiError, LanesClient
from lanes.client.reconcile import apply_move, column_tasks, hovered_column, resolve_drop_target, find_task
from lanes.models import TaskStatus
from lanes.schemas import TaskRead
from lanes.logging_config import get_logger

logger = get_logger(__name__)


class MoveOutcome(str, Enum):
    IGNORED = "ignored"          # no drop target, or no active drag
    UNCHANGED = "unchanged"      # dropped where it already was, no request sent
    COMMITTED = "committed"      # server accepted the move
    ROLLED_BACK = "rolled_back"  # server rejected it, snapshot restored
    SUPERSEDED = "superseded"    # server rejected it while other drops overlapped, board re-fetched


class BoardSession:
    """Task list and drag state for one project board."""

    def __init__(self, client: LanesClient, project_id: uuid.UUID):
        self.client = client
        self.project_id = project_id
        self.tasks: list[TaskRead] = []
        self.active_task_id: uuid.UUID | None = None
        self.over_column: TaskStatus | None = None
        self._generation = 0
        # generation -> whether another drop overlapped it
        self._in_flight: dict[int, bool] = {}

    def column(self, status: TaskStatus) -> list[TaskRead]:
        return column_tasks(self.tasks, status)

    async def refresh(self) -> list[TaskRead]:
        """Replace local state with the server's board."""
        self.tasks = await self.client.list_tasks(self.project_id)
        return self.tasks

    async def _refetch_after_move(self, task_id: uuid.UUID) -> None:
        """Refresh, keeping the current board if the fetch itself fails."""
        try:
            await self.refresh()
        except (ApiError, httpx.HTTPError) as exc:
            logger.warning(f"Re-fetch after move of task {task_id} failed, board may be stale: {exc}")

    def drag_start(self, task_id: uuid.UUID) -> TaskRead | None:
        task = find_task(self.tasks, task_id)
        self.active_task_id = task.id if task else None
        return task

    def drag_over(self, over_id: str | None) -> TaskStatus | None:
        """Track the hovered column for highlighting. Does not touch the task list."""
        self.over_column = hovered_column(self.tasks, over_id)
        return self.over_column

    async def drag_end(self, over_id: str | None) -> MoveOutcome:
        task_id = self.active_task_id
        self.active_task_id = None
        self.over_column = None

        if task_id is None:
            return MoveOutcome.IGNORED

        target = resolve_drop_target(self.tasks, task_id, over_id)
        if target is None:
            return MoveOutcome.IGNORED

        task = find_task(self.tasks, task_id)
        if (task.status, task.position) == (target.status, target.position):
            return MoveOutcome.UNCHANGED

        snapshot = list(self.tasks)
        self._generation += 1
        generation = self._generation

        for pending in self._in_flight:
            self._in_flight[pending] = True
        self._in_flight[generation] = bool(self._in_flight)

        self.tasks = apply_move(self.tasks, task_id, target.status, target.position)

        try:
            await self.client.move_task(task_id, target.status, target.position)
        except (ApiError, httpx.HTTPError) as exc:
            overlapped = self._in_flight.pop(generation)
            if generation == self._generation and not overlapped:
                logger.warning(f"Move of task {task_id} failed, restoring board: {exc}")
                self.tasks = snapshot
                return MoveOutcome.ROLLED_BACK

            logger.warning(f"Move of task {task_id} failed while other moves overlapped, re-fetching: {exc}")
            await self._refetch_after_move(task_id)
            return MoveOutcome.SUPERSEDED

        self._in_flight.pop(generation)
        await self._refetch_after_move(task_id)
        return MoveOutcome.COMMITTED
