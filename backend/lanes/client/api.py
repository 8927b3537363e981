"""
HTTP client for the Lanes task endpoints.
"""

import uuid
from typing import Any

import httpx

from lanes.models import TaskPriority, TaskStatus
from lanes.schemas import TaskRead
from lanes.logging_config import get_logger

logger = get_logger(__name__)


class ApiError(Exception):
    """Non-2xx response from the Lanes API."""

    def __init__(self, status_code: int, error: str, message: str):
        self.status_code = status_code
        self.error = error
        self.message = message
        super().__init__(f"{status_code} {error}: {message}")


class LanesClient:
    """
    Thin async wrapper around the task endpoints.

    Pass ``transport`` to talk to an in-process app (httpx.ASGITransport)
    or a stub (httpx.MockTransport).
    """

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ):
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> "LanesClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, path: str, json: Any = None) -> dict | None:
        response = await self._http.request(method, path, json=json)

        if response.is_error:
            try:
                body = response.json()
            except ValueError:
                body = {}
            raise ApiError(
                response.status_code,
                body.get("error", "http_error"),
                body.get("message", response.reason_phrase),
            )

        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()

    async def list_tasks(self, project_id: uuid.UUID) -> list[TaskRead]:
        body = await self._request("GET", f"/projects/{project_id}/tasks")
        return [TaskRead.model_validate(item) for item in body["tasks"]]

    async def create_task(
        self,
        project_id: uuid.UUID,
        title: str,
        description: str | None = None,
        priority: TaskPriority | None = None,
        status: TaskStatus | None = None,
    ) -> TaskRead:
        payload: dict[str, Any] = {"title": title}
        if description is not None:
            payload["description"] = description
        if priority is not None:
            payload["priority"] = priority.value
        if status is not None:
            payload["status"] = status.value

        body = await self._request("POST", f"/projects/{project_id}/tasks", json=payload)
        return TaskRead.model_validate(body["task"])

    async def update_task(self, task_id: uuid.UUID, **changes: Any) -> TaskRead:
        payload = {
            field: value.value if isinstance(value, TaskPriority) else value
            for field, value in changes.items()
        }
        body = await self._request("PATCH", f"/tasks/{task_id}", json=payload)
        return TaskRead.model_validate(body["task"])

    async def delete_task(self, task_id: uuid.UUID) -> None:
        await self._request("DELETE", f"/tasks/{task_id}")

    async def move_task(self, task_id: uuid.UUID, status: TaskStatus, position: int) -> TaskRead:
        logger.debug(f"PATCH /tasks/{task_id}/move -> {status.value}[{position}]")
        body = await self._request(
            "PATCH",
            f"/tasks/{task_id}/move",
            json={"status": status.value, "position": position},
        )
        return TaskRead.model_validate(body["task"])
