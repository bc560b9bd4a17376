"""HTTP route definitions for the agent's control API."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, status

from app.schemas import AgentStatus, ConfigurationOut, EffectiveConfigReport
from services.agent import EdgeAgent, build_default_agent, configuration_out

router = APIRouter()


def get_agent() -> EdgeAgent:
    return build_default_agent()


@router.post(
    "/config/desired",
    response_model=EffectiveConfigReport,
    response_model_exclude_none=True,
    summary="Apply a sparse desired-configuration update.",
)
def update_desired_configuration(
    desired: Dict[str, Any] = Body(..., description="Desired properties, e.g. intervalMillis and endpoint."),
    agent: EdgeAgent = Depends(get_agent),
) -> EffectiveConfigReport:
    # Invalid fields are dropped by the handler; the report lists what was accepted.
    return agent.handler.on_update_received(desired)


@router.get(
    "/config",
    response_model=ConfigurationOut,
    summary="Fetch the effective configuration used by the telemetry loop.",
)
async def get_configuration(agent: EdgeAgent = Depends(get_agent)) -> ConfigurationOut:
    return configuration_out(agent.store.get())


@router.get(
    "/status",
    response_model=AgentStatus,
    summary="Fetch telemetry loop state and counters.",
)
async def get_status(agent: EdgeAgent = Depends(get_agent)) -> AgentStatus:
    return agent.status()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /status for telemetry loop state."}
