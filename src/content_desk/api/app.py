# src/content_desk/api/app.py

"""
HTTP surface.

JSON in, JSON out. Errors raised by the stores are DeskError subclasses and are
turned into {"error": <code>} with the matching status by one handler. The chat
webhook is the exception: it always answers 200 so the chat platform never
retries a delivery.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from ..cli.commands import registry as command_registry
from ..connectors.matrix_connector import start_matrix
from ..core.errors import DeskError, NotFoundError, StorageError
from ..core.state import AppState
from ..digest.digest import send_digest
from ..digest.digest_scheduler import run_digest_scheduler
from .schemas import PrereqIn, RefIn, TaskCreate, TaskPatch

logger = logging.getLogger(__name__)


def _extract_message(body: Any) -> dict[str, Any] | None:
    """Accept a Telegram-style update {"message": {...}} or the bare message."""
    if not isinstance(body, dict):
        return None
    msg = body.get("message", body)
    if not isinstance(msg, dict) or not isinstance(msg.get("chat"), dict):
        return None
    return msg


async def start_services(state: AppState) -> None:
    settings = state.settings

    connector = await start_matrix(state)
    if connector is not None:
        state.background.append(connector)

    at = getattr(settings, "digest_time", None)
    if at is not None and state.messenger is not None:
        task = asyncio.create_task(
            run_digest_scheduler(
                state.queries,
                state.messenger,
                destination_id=getattr(settings, "digest_chat_id", None),
                at=at,
            )
        )
        state.background.append(task)


async def stop_services(state: AppState) -> None:
    while state.background:
        item = state.background.pop()
        if isinstance(item, asyncio.Task):
            item.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await item
        else:
            try:
                await item.stop()
            except Exception:
                logger.exception("Failed to stop %r", item)


def create_app(state: AppState) -> FastAPI:
    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI):
        await start_services(state)
        try:
            yield
        finally:
            await stop_services(state)

    app = FastAPI(title=str(getattr(state.settings, "app_name", "content-desk")), lifespan=lifespan)
    app.state.desk = state

    @app.exception_handler(DeskError)
    async def desk_error_handler(_request: Request, exc: DeskError) -> JSONResponse:
        if exc.status >= 500:
            logger.error("Request failed code=%s detail=%s", exc.code, exc.detail)
        else:
            logger.info("Request rejected code=%s detail=%s", exc.code, exc.detail)
        return JSONResponse({"error": exc.code}, status_code=exc.status)

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Invalid request body: %s", exc.errors())
        return JSONResponse({"error": "invalid_body"}, status_code=400)

    @app.get("/api/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.post("/api/webhook")
    async def webhook(request: Request) -> Response:
        try:
            body = await request.json()
        except ValueError:
            logger.warning("Webhook body is not JSON; ignored")
            return Response(status_code=200)

        msg = _extract_message(body)
        if msg is None:
            return Response(status_code=200)

        raw_chat_id = msg["chat"].get("id")
        if raw_chat_id is None or not str(raw_chat_id).strip():
            logger.info("Webhook message without a chat id; ignored")
            return Response(status_code=200)
        chat_id = str(raw_chat_id).strip()
        text = str(msg.get("text") or "").strip()

        try:
            reply = command_registry.handle(state, text, chat_id=chat_id)
        except Exception:
            logger.exception("Webhook command failed chat_id=%s text=%r", chat_id, text)
            return Response(status_code=200)

        if state.messenger is not None:
            try:
                await state.messenger.send_text(text=reply, room_id=chat_id)
            except Exception:
                logger.exception("Webhook reply failed chat_id=%s", chat_id)

        return Response(status_code=200)

    @app.get("/api/digest")
    async def digest() -> JSONResponse:
        try:
            result = await send_digest(
                state.queries,
                state.messenger,
                destination_id=getattr(state.settings, "digest_chat_id", None),
            )
        except StorageError:
            logger.exception("Digest failed")
            return JSONResponse({"error": "digest_failed"}, status_code=500)
        return JSONResponse({"sent": result.sent, "count": result.count})

    @app.post("/api/task")
    def create_task(body: Optional[TaskCreate] = None) -> dict[str, Any]:
        # No body at all is treated as an empty task so the title check reports it.
        body = body or TaskCreate()
        task_id = state.tasks.create_task(
            title=body.title,
            due=body.due,
            assignee_handle=body.assignee_username,
            description=body.description,
            instructions=body.instructions,
            refs=[r.to_new_reference() for r in body.refs],
            prereq_ids=body.prereq_ids,
        )
        return {"ok": True, "id": task_id}

    @app.patch("/api/task/{task_id}")
    def patch_task(task_id: int, body: TaskPatch) -> dict[str, Any]:
        state.tasks.partial_update(task_id, **body.changes())
        return {"ok": True, "id": task_id}

    @app.post("/api/task/{task_id}/ref")
    def add_ref(task_id: int, body: RefIn) -> dict[str, bool]:
        state.refs.add_reference(task_id, body.url, body.caption)
        return {"ok": True}

    @app.post("/api/task/{task_id}/prereq")
    def add_prereq(task_id: int, body: PrereqIn) -> dict[str, bool]:
        state.deps.add_prerequisite(task_id, body.requires_task_id)
        return {"ok": True}

    @app.get("/api/task/{task_id}")
    def get_task(task_id: int) -> dict[str, Any]:
        view = state.queries.get_task(task_id)
        if view is None:
            raise NotFoundError(detail=f"task {task_id} not found")
        return view.to_dict()

    @app.get("/api/tasks")
    def list_tasks(
        status: Optional[str] = None,
        due: Optional[str] = None,
        assignee: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        return [s.to_dict() for s in state.queries.list_tasks(status=status, due=due, assignee=assignee)]

    return app
