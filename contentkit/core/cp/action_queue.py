"""
Action Queue
============

Serializes control panel action requests so only one is in flight at a time.
Requests are sent in the order they were posted, and each callback runs
before the next request goes out.
"""

import asyncio
import inspect
import json
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict, Optional, Tuple, Union

import aiohttp

from contentkit.config.logging import get_logger
from contentkit.config.settings import get_settings
from contentkit.models.schemas import ActionRequest, ActionResponse

logger = get_logger(__name__)

Callback = Callable[[ActionResponse], Union[None, Awaitable[None]]]


class ActionRequestError(Exception):
    """Exception raised when an action request fails."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ActionClient:
    """HTTP client that posts JSON to controller actions."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.action_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.action_timeout
        self.logger: Any = logger.bind(component="action_client")
        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def action_url(self, action: str) -> str:
        return f"{self.base_url}/actions/{action.strip('/')}"

    async def post(self, action: str, data: Optional[Dict[str, Any]] = None) -> ActionResponse:
        url = self.action_url(action)
        try:
            session = await self._get_session()
            async with session.post(
                url, json=data or {}, headers={"Accept": "application/json"}
            ) as response:
                if not 200 <= response.status < 300:
                    error_text = await response.text()
                    raise ActionRequestError(
                        f"Action {action} failed: {response.status} - {error_text}",
                        status_code=response.status,
                    )
                body = await response.text()
                payload = json.loads(body) if body.strip() else {}
                self.logger.debug("Action request succeeded", action=action, status=response.status)
                return ActionResponse(data=payload, status_text="success", status_code=response.status)
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            error_msg = f"Action {action} failed: {e}"
            self.logger.error("Action request error", action=action, error=error_msg)
            raise ActionRequestError(error_msg) from e


class ActionQueue:
    """FIFO queue that keeps at most one action request outstanding."""

    def __init__(self, client: Any) -> None:
        self.client = client
        self.logger: Any = logger.bind(component="action_queue")
        self._queue: Deque[Tuple[ActionRequest, Optional[Callback]]] = deque()
        self._idle = asyncio.Event()
        self._idle.set()
        self._runner: Optional["asyncio.Task[None]"] = None
        self.waiting_on_action = False

    def __len__(self) -> int:
        return len(self._queue)

    def post_action_request(
        self,
        action: str,
        data: Optional[Dict[str, Any]] = None,
        callback: Optional[Callback] = None,
    ) -> None:
        """Queue a request, starting the queue if nothing is in flight.

        Must be called from a running event loop.
        """
        self._queue.append((ActionRequest(action=action, data=data or {}), callback))

        if not self.waiting_on_action:
            self.waiting_on_action = True
            self._idle.clear()
            self._runner = asyncio.get_running_loop().create_task(self._post_next_action_requests())

    async def _post_next_action_requests(self) -> None:
        try:
            while self._queue:
                request, callback = self._queue.popleft()
                try:
                    response = await self.client.post(request.action, request.data)
                except ActionRequestError as e:
                    response = ActionResponse(
                        data={"success": False, "error": str(e)},
                        status_text="error",
                        status_code=e.status_code,
                    )
                except Exception as e:
                    self.logger.exception("Action request raised", action=request.action)
                    response = ActionResponse(
                        data={"success": False, "error": str(e)},
                        status_text="error",
                    )

                if callback is None:
                    continue
                try:
                    result = callback(response)
                    if inspect.isawaitable(result):
                        await result
                except Exception:
                    self.logger.exception("Action callback raised", action=request.action)
        finally:
            self.waiting_on_action = False
            self._idle.set()

    async def join(self) -> None:
        """Wait until every queued request has been sent and handled."""
        await self._idle.wait()
