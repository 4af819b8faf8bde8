"""
REST + WebSocket endpoints for the live expression detector.
"""
import asyncio
import logging

import cv2
from fastapi import APIRouter, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import Response

from moodcam.config import Settings
from moodcam.models import ExpressionState
from moodcam.session import ExpressionSession

router = APIRouter()
settings = Settings()
session = ExpressionSession(settings)
logger = logging.getLogger(__name__)


@router.get("/expression")
async def expression():
    """
    Current detector snapshot.

    Returns:
        dict: label, display text, color, emoji, face count, scores, readiness.
    """
    return session.detector.snapshot().model_dump()


@router.get("/expression/overlay.jpg")
async def expression_overlay():
    """
    Latest camera frame with overlay and mood band, JPEG encoded.
    """
    view = session.detector.render_view()
    if view is None:
        raise HTTPException(status_code=404, detail="No frame available yet")
    ok, buf = cv2.imencode(".jpg", view)
    if not ok:
        logger.error("[api] jpeg encoding failed")
        raise HTTPException(status_code=500, detail="Could not encode frame")
    return Response(content=buf.tobytes(), media_type="image/jpeg")


@router.post("/session/start")
def session_start():
    try:
        started = session.start()
    except RuntimeError as e:
        logger.exception("[api] session start failed")
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "started" if started else "already_running"}


@router.get("/session/status")
async def session_status():
    return session.status().model_dump()


@router.post("/session/stop")
def session_stop():
    if not session.stop():
        return {"status": "not_running"}
    return {"status": "stopped"}


@router.websocket("/ws/expression")
async def expression_ws(ws: WebSocket):
    """Push every new snapshot to the client, starting with the current one."""
    await ws.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue[ExpressionState] = asyncio.Queue(maxsize=1)

    def _put_latest(state: ExpressionState):
        # single slot: a newer snapshot replaces one the client has not received yet
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(state)

    # session-level subscription keeps following the detector across stop/start
    unsubscribe = session.subscribe(lambda st: loop.call_soon_threadsafe(_put_latest, st))
    last = session.detector.snapshot()
    # client messages are ignored; receiving only serves to notice the disconnect
    receiver = asyncio.ensure_future(ws.receive())
    try:
        await ws.send_json(last.model_dump())
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, receiver}, timeout=max(1.0, 4 * settings.POLL_INTERVAL),
                                         return_when=asyncio.FIRST_COMPLETED)
            state = getter.result() if getter in done else None
            if getter not in done:
                getter.cancel()
            if receiver in done:
                if receiver.result().get("type") == "websocket.disconnect":
                    break
                receiver = asyncio.ensure_future(ws.receive())
                if state is None:
                    continue
            if state is None:
                # timed out; resync with whatever the session holds now
                state = session.detector.snapshot()
            if state != last:
                await ws.send_json(state.model_dump())
                last = state
        logger.debug("[api] websocket client disconnected")
    except WebSocketDisconnect:
        logger.debug("[api] websocket client disconnected")
    finally:
        receiver.cancel()
        unsubscribe()
