"""WebSocket streams of live collection snapshots."""

from __future__ import annotations

import asyncio
import hmac
import logging
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect

from ..config import settings
from ..services import assignment_svc, response_svc, template_svc

logger = logging.getLogger(__name__)

router = APIRouter()


def _key_ok(key: str | None) -> bool:
    expected = settings.admin_api_key.strip()
    if not expected:
        return True
    return bool(key) and hmac.compare_digest(key, expected)


async def _drain(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


async def _stream(
    websocket: WebSocket,
    subscribe: Callable[..., Awaitable[Callable[[], None]]],
    key: str | None,
    **scope: Any,
) -> None:
    if not _key_ok(key):
        await websocket.close(code=4001, reason="Invalid admin API key")
        return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()
    unsubscribe = await subscribe(queue.put_nowait, **scope)
    receiver = asyncio.create_task(_drain(websocket))
    try:
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, return_when=asyncio.FIRST_COMPLETED)
            if receiver in done:
                getter.cancel()
                break
            await websocket.send_json(getter.result())
    except WebSocketDisconnect:
        pass
    finally:
        unsubscribe()
        receiver.cancel()
        logger.info("Live stream closed: %s", websocket.url.path)


@router.websocket("/ws/templates")
async def live_templates(websocket: WebSocket, key: str | None = Query(None)):
    await _stream(websocket, template_svc.subscribe_templates, key)


@router.websocket("/ws/assignments")
async def live_assignments(
    websocket: WebSocket,
    key: str | None = Query(None),
    student_id: str | None = Query(None, alias="studentId"),
):
    await _stream(websocket, assignment_svc.subscribe_assignments, key, student_id=student_id)


@router.websocket("/ws/responses")
async def live_responses(websocket: WebSocket, key: str | None = Query(None)):
    await _stream(websocket, response_svc.subscribe_responses, key)
