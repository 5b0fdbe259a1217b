from __future__ import annotations  # FastAPI server exposing the interview simulator

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import routes
from config import EVALUATOR_ROUTE, route_for
from graph.machine import InterviewMachine
from llm_gateway import LlmGateway


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):  # Warn about missing credentials at boot, flush the session at exit
    if not LlmGateway().is_configured(route_for(EVALUATOR_ROUTE)):
        logger.warning("No LLM API key configured; evaluation will use offline heuristics")
    yield
    if routes._machine is not None:
        await routes._machine.close()


app = FastAPI(title="Pressure Interview Simulator API", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"]
)
app.include_router(routes.router)


@app.get("/api/health")
def health(machine: InterviewMachine = Depends(routes.get_machine)) -> dict:  # Liveness, service status and timings
    timings = machine.monitor.snapshot() if machine.monitor is not None else {}
    return {
        "status": "ok",
        "service_status": machine.service_status,
        "timings": {name: stats.model_dump() for name, stats in timings.items()},
    }
