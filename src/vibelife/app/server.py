from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from ..config import SimulationConfig
from ..errors import OrganismNotFoundError, SnapshotError
from ..logging_config import configure_logging
from ..sim.core.simulation import Simulation
from ..sim.types.snapshot import OrganismSnapshot

logger = logging.getLogger(__name__)


def _payload(population: List[OrganismSnapshot]) -> List[Dict[str, Any]]:
    return [snapshot.to_dict() for snapshot in population]


class SimulationController:
    """Serializes host access to one Simulation and drives the optional auto-run loop."""

    def __init__(self, config: SimulationConfig, generation_interval: float = 0.5):
        self.config = config
        self.simulation = Simulation(config=config)
        self.generation_interval = max(0.01, generation_interval)
        self.running = False
        self.speed_multiplier = 1.0
        self.clients: Set[WebSocket] = set()
        self._lock = asyncio.Lock()
        self._loop_task: asyncio.Task | None = None

    def ensure_loop(self) -> None:
        if self._loop_task is None:
            self._loop_task = asyncio.create_task(self._loop())

    async def start(self) -> None:
        self.ensure_loop()
        self.running = True

    async def stop(self) -> None:
        self.running = False

    async def reset(self) -> None:
        async with self._lock:
            self.simulation.reset()
        await self._broadcast_population()

    async def create_organisms(
        self, motility: float, photosynthesis: float, size: float, count: int = 1
    ) -> List[Dict[str, Any]]:
        async with self._lock:
            if count == 1:
                created = [self.simulation.create_initial_organism(motility, photosynthesis, size)]
            else:
                created = self.simulation.create_initial_population(count, motility, photosynthesis, size)
        return _payload(created)

    async def next_generation(self) -> Dict[str, Any]:
        async with self._lock:
            population = self.simulation.simulate_generation()
            generation = self.simulation.generation_count
        return {"generation": generation, "organisms": _payload(population)}

    async def fast_forward(self, generations: int) -> Dict[str, Any]:
        async with self._lock:
            population = self.simulation.fast_forward(generations)
            generation = self.simulation.generation_count
        return {"generation": generation, "organisms": _payload(population)}

    async def organism_actions(self, organism_id: str) -> Dict[str, Any]:
        async with self._lock:
            return {
                "id": organism_id,
                "actions": self.simulation.get_organism_actions(organism_id),
                "weights": self.simulation.get_organism_action_weights(organism_id),
            }

    async def status(self) -> Dict[str, Any]:
        async with self._lock:
            metrics = self.simulation.metrics
            return {
                "running": self.running,
                "generation": self.simulation.generation_count,
                "population": self.simulation.get_organism_count(),
                "environment": self.simulation.environment.to_dict(),
                "metrics": asdict(metrics) if metrics is not None else None,
            }

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.generation_interval / self.speed_multiplier)
            if not self.running:
                continue
            async with self._lock:
                self.simulation.step()
            await self._broadcast_population()

    async def _broadcast_population(self) -> None:
        if not self.clients:
            return
        async with self._lock:
            payload = json.dumps(
                {
                    "type": "population",
                    "generation": self.simulation.generation_count,
                    "organisms": _payload(self.simulation.snapshot()),
                }
            )
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await client.send_text(payload)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)


def _load_server_config() -> SimulationConfig:
    config_path: Optional[str] = os.getenv("VIBELIFE_CONFIG")
    if config_path:
        return SimulationConfig.from_yaml(Path(config_path))
    return SimulationConfig()


app = FastAPI(title="Vibelife Ecosystem Simulation")
controller = SimulationController(_load_server_config())


def _float_field(payload: dict, name: str, default: float) -> float:
    try:
        return float(payload.get(name, default))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=422, detail=f"'{name}' must be a number") from exc


def _int_field(payload: dict, name: str, default: int) -> int:
    value = payload.get(name, default)
    if isinstance(value, bool) or not isinstance(value, int):
        raise HTTPException(status_code=422, detail=f"'{name}' must be an integer")
    return value


@app.exception_handler(SnapshotError)
async def _snapshot_error_handler(_request: Any, exc: SnapshotError) -> JSONResponse:
    logger.error("Snapshot marshalling failed: %s", exc)
    return JSONResponse({"detail": str(exc)}, status_code=500)


@app.on_event("startup")
async def _startup() -> None:
    configure_logging(include_uvicorn=True)
    controller.ensure_loop()


@app.get("/api/status")
async def status() -> JSONResponse:
    return JSONResponse(await controller.status())


@app.post("/api/organisms")
async def create_organisms(payload: dict) -> JSONResponse:
    founders = controller.config.founders
    count = _int_field(payload, "count", 1)
    if count < 1:
        raise HTTPException(status_code=422, detail="'count' must be at least 1")
    created = await controller.create_organisms(
        _float_field(payload, "motility", founders.motility),
        _float_field(payload, "photosynthesis", founders.photosynthesis),
        _float_field(payload, "size", founders.size),
        count=count,
    )
    return JSONResponse({"organisms": created})


@app.post("/api/generations/next")
async def next_generation() -> JSONResponse:
    return JSONResponse(await controller.next_generation())


@app.post("/api/generations/fast-forward")
async def fast_forward(payload: dict) -> JSONResponse:
    generations = _int_field(payload, "generations", 1)
    try:
        result = await controller.fast_forward(generations)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return JSONResponse(result)


@app.get("/api/organisms/{organism_id}/actions")
async def organism_actions(organism_id: str) -> JSONResponse:
    try:
        return JSONResponse(await controller.organism_actions(organism_id))
    except OrganismNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": True})


@app.post("/api/control/stop")
async def stop_simulation() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": False})


@app.post("/api/control/reset")
async def reset_simulation() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.running, "generation": controller.simulation.generation_count})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    speed = _float_field(payload, "multiplier", 1.0)
    controller.speed_multiplier = max(0.1, min(5.0, speed))
    return JSONResponse({"multiplier": controller.speed_multiplier})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    await controller._broadcast_population()
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        controller.clients.discard(websocket)


__all__ = ["app", "controller", "SimulationController"]
