"""
FastAPI routes exposing the credential commands to the host application.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Annotated, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from deviceflow.core.errors import AuthError
from deviceflow.dependencies import get_api_client, get_auth_commands
from deviceflow.schemas import (
    AuthStatusResponse,
    DeviceCodeInfo,
    DevicePollRequest,
    SubsystemTokenResponse,
)
from deviceflow.services import AuthCommandError, AuthCommands, AuthenticatedApiClient

router = APIRouter()
logger = logging.getLogger(__name__)

_STATUS_BY_KIND = {
    AuthCommandError.NOT_AUTHENTICATED: HTTPStatus.UNAUTHORIZED,
    AuthCommandError.FLOW_EXPIRED: HTTPStatus.GONE,
    AuthCommandError.PROVIDER: HTTPStatus.BAD_GATEWAY,
    AuthCommandError.STORAGE: HTTPStatus.INTERNAL_SERVER_ERROR,
    AuthCommandError.INVALID_REQUEST: HTTPStatus.BAD_REQUEST,
}


def _raise_http(exc: AuthCommandError) -> NoReturn:
    status_code = _STATUS_BY_KIND.get(exc.kind, HTTPStatus.INTERNAL_SERVER_ERROR)
    raise HTTPException(status_code=status_code, detail=exc.message) from exc


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.post("/auth/device/start", response_model=DeviceCodeInfo)
async def start_device_flow(
    commands: Annotated[AuthCommands, Depends(get_auth_commands)],
) -> DeviceCodeInfo:
    """Request a device code the user confirms on the verification page."""
    try:
        return await commands.begin_device_flow()
    except AuthCommandError as exc:
        _raise_http(exc)


@router.post("/auth/device/poll", response_model=AuthStatusResponse)
async def poll_device_flow(
    payload: DevicePollRequest,
    commands: Annotated[AuthCommands, Depends(get_auth_commands)],
) -> AuthStatusResponse:
    """Wait until the user authorizes the device code or it expires."""
    try:
        return await commands.poll_device_flow(
            device_code=payload.device_code,
            interval=payload.interval,
            expires_in=payload.expires_in,
        )
    except AuthCommandError as exc:
        _raise_http(exc)


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(
    commands: Annotated[AuthCommands, Depends(get_auth_commands)],
) -> AuthStatusResponse:
    return await commands.check_status()


@router.post("/auth/logout", status_code=HTTPStatus.OK)
async def logout(
    commands: Annotated[AuthCommands, Depends(get_auth_commands)],
) -> dict:
    try:
        await commands.logout()
    except AuthCommandError as exc:
        _raise_http(exc)
    return {"status": "logged_out"}


@router.get("/auth/token", response_model=SubsystemTokenResponse)
async def subsystem_token(
    commands: Annotated[AuthCommands, Depends(get_auth_commands)],
) -> SubsystemTokenResponse:
    """Hand a bearer token to a dependent client such as chat."""
    try:
        return await commands.fetch_subsystem_token()
    except AuthCommandError as exc:
        _raise_http(exc)


@router.get("/api-proxy", response_class=Response)
async def api_proxy(
    api_client: Annotated[AuthenticatedApiClient, Depends(get_api_client)],
    path: str = Query(..., description="API path relative to the configured base URL."),
) -> Response:
    """Forward an authenticated GET and return the raw body."""
    try:
        body = await api_client.get(path)
    except AuthError as exc:
        logger.warning("API proxy request failed: %s", exc)
        _raise_http(AuthCommandError.from_auth_error(exc))
    return Response(content=body, media_type="application/json")


__all__ = ["router"]
