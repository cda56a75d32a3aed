from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections import deque
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
import uvicorn

from .config import AppConfig
from .flock import Flock
from .metrics import collect_metrics
from .viewport import ScreenState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QueuedFrame:
    frame: int
    payload: str


class SimulationController:
    def __init__(self, config: AppConfig):
        self.config = config
        self.screen = ScreenState(config.width, config.height)
        self.flock = Flock(config.width, config.height, config.flock)
        self.broadcast_interval = max(1, config.broadcast_interval)
        self.running = False
        self.frame = 0
        self.active_count = 0
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._client_last_sent: Dict[WebSocket, int] = {}
        self._frame_queue: deque[QueuedFrame] = deque(maxlen=max(1, config.max_queued_frames))
        self._lock = asyncio.Lock()
        self._queue_lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    async def start(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        viewport = self.screen.snapshot()
        async with self._lock:
            self.flock.reset(viewport.width, viewport.height)
            self.frame = 0
            self.active_count = 0
        async with self._queue_lock:
            self._frame_queue.clear()
        for client in self._client_last_sent:
            self._client_last_sent[client] = -1
        await self._broadcast_frame()

    async def advance(self) -> int:
        viewport = self.screen.snapshot()
        async with self._lock:
            self.active_count = self.flock.step(viewport.width, viewport.height)
            self.frame += 1
        return self.active_count

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.frame_interval / self.speed_multiplier)
            if not self.running:
                continue
            await self.advance()
            if self.frame % self.broadcast_interval == 0:
                await self._broadcast_frame()

    async def acknowledge(self, frame: int) -> None:
        async with self._queue_lock:
            while self._frame_queue and self._frame_queue[0].frame <= frame:
                self._frame_queue.popleft()

    def _serialize_frame(self) -> QueuedFrame:
        flat = []
        for vertex in self.flock.vertices(self.active_count):
            flat.append(round(vertex.x, 5))
            flat.append(round(vertex.y, 5))
        viewport = self.screen.snapshot()
        payload = {
            "type": "frame",
            "frame": self.frame,
            "active_count": self.active_count,
            "viewport": {"width": viewport.width, "height": viewport.height},
            "vertices": flat,
        }
        return QueuedFrame(frame=self.frame, payload=json.dumps(payload))

    async def _send_pending_frames(self, client: WebSocket) -> None:
        last_sent = self._client_last_sent.get(client, -1)
        async with self._queue_lock:
            pending = [item for item in self._frame_queue if item.frame > last_sent]
        for item in pending:
            await client.send_text(item.payload)
            last_sent = item.frame
        self._client_last_sent[client] = last_sent

    async def _broadcast_frame(self) -> None:
        if not self.clients:
            return
        queued = self._serialize_frame()
        async with self._queue_lock:
            self._frame_queue.append(queued)
        stale: Set[WebSocket] = set()
        for client in list(self.clients):
            try:
                await self._send_pending_frames(client)
            except WebSocketDisconnect:
                logger.info("dropping disconnected client")
                stale.add(client)
            except Exception:
                logger.exception("dropping client after send failure")
                stale.add(client)
        for client in stale:
            self.clients.discard(client)
            self._client_last_sent.pop(client, None)


app = FastAPI(title="Flocking Web Simulation")
controller = SimulationController(AppConfig())
static_dir = Path(__file__).parent / "static"
app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    viewport = controller.screen.snapshot()
    metrics = collect_metrics(controller.flock, controller.frame)
    return JSONResponse(
        {
            "running": controller.running,
            "frame": controller.frame,
            "viewport": {"width": viewport.width, "height": viewport.height},
            "metrics": asdict(metrics),
        }
    )


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.running = True
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    controller.running = False
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "frame": controller.frame})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = float(payload.get("multiplier", 1.0))
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.post("/api/viewport")
async def set_viewport(payload: dict) -> JSONResponse:
    try:
        controller.screen.set_size(int(payload["width"]), int(payload["height"]))
        if "scale_factor" in payload:
            controller.screen.set_scale_factor(float(payload["scale_factor"]))
    except (KeyError, TypeError, ValueError) as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)
    viewport = controller.screen.snapshot()
    return JSONResponse({"width": viewport.width, "height": viewport.height, "scale_factor": viewport.scale_factor})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    logger.info("client connected")
    controller.clients.add(websocket)
    controller._client_last_sent[websocket] = -1
    await controller._send_pending_frames(websocket)
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if isinstance(payload, dict) and payload.get("type") == "ack":
                frame = payload.get("frame")
                if isinstance(frame, int):
                    await controller.acknowledge(frame)
    except WebSocketDisconnect:
        logger.info("client disconnected")
        controller.clients.discard(websocket)
        controller._client_last_sent.pop(websocket, None)


def main() -> None:
    parser = argparse.ArgumentParser(description="Serve the flocking simulation over HTTP/WebSocket")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    parser.add_argument("--log-level", default="INFO")
    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


__all__ = ["app", "controller"]
