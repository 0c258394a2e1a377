"""FastAPI routes for the wolgate API."""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wolgate import __version__
from wolgate.api.models import (
    HealthInterfaces,
    HealthResponse,
    InterfaceSummary,
    WakeAllRequest,
    WakeRequest,
)
from wolgate.auth.apikey import HEADER_NAME, verify_api_key
from wolgate.config.loader import Settings
from wolgate.core.interfaces import InterfaceRecord
from wolgate.core.network import NetworkConfig
from wolgate.core.wol import InvalidMacAddress, WakeError, wake, wake_all

logger = logging.getLogger(__name__)

_OPEN_PATHS = {"/health"}


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Require the x-api-key header on every route except the open ones."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in _OPEN_PATHS:
            return await call_next(request)

        expected: str = request.app.state.settings.api_key
        if verify_api_key(request.headers.get(HEADER_NAME), expected):
            return await call_next(request)

        logger.warning("Rejected unauthenticated request to %s", request.url.path)
        return JSONResponse({"error": "Unauthorized"}, status_code=401)


def _summary(iface: Optional[InterfaceRecord]) -> Optional[InterfaceSummary]:
    return InterfaceSummary(**iface.summary()) if iface else None


def create_app(settings: Settings, network: Optional[NetworkConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Loaded settings (API key, WOL port, ...)
        network: Initialized network configuration. If None, it is built from
            settings with NetworkConfig.initialize().

    Returns:
        FastAPI application instance
    """
    app = FastAPI(
        title="wolgate",
        version=__version__,
        description="Wake-on-LAN gateway for LAN and Docker networks",
    )

    # ── App state ─────────────────────────────────────────────────────────────
    app.state.settings = settings
    app.state.network = network if network is not None else NetworkConfig.initialize(settings)

    app.add_middleware(ApiKeyMiddleware)

    def _net() -> NetworkConfig:
        net: NetworkConfig = app.state.network
        return net

    # ── Health ────────────────────────────────────────────────────────────────

    @app.get("/health", response_model=HealthResponse)
    async def get_health() -> HealthResponse:
        selection = _net().selection
        return HealthResponse(
            auto_detect=settings.auto_detect,
            interfaces=HealthInterfaces(
                local=_summary(selection.local),
                docker=_summary(selection.docker),
            ),
            all_interfaces=len(selection.interfaces),
        )

    # ── Interfaces ────────────────────────────────────────────────────────────

    @app.get("/interfaces")
    async def get_interfaces() -> JSONResponse:
        selection = _net().selection.to_dict()
        return JSONResponse(
            {
                "configured": {"local": selection["local"], "docker": selection["docker"]},
                "all": selection["all"],
            }
        )

    @app.post("/interfaces/detect")
    async def post_detect() -> JSONResponse:
        try:
            selection = await asyncio.to_thread(_net().detect)
        except Exception as exc:
            logger.exception("Interface detection failed")
            return JSONResponse(
                {"error": "Interface detection failed", "details": str(exc)}, status_code=500
            )
        return JSONResponse(
            {"success": True, "message": "Re-detection complete", "result": selection.to_dict()}
        )

    # ── Wake ──────────────────────────────────────────────────────────────────

    @app.post("/wake")
    async def post_wake(req: Optional[WakeRequest] = None) -> JSONResponse:
        if req is None or not req.mac:
            return JSONResponse({"error": "MAC address required"}, status_code=400)

        iface = _net().lookup(req.interface)
        if iface is None:
            return JSONResponse(
                {
                    "error": "Interface not found or not configured",
                    "requested": req.interface or "local",
                },
                status_code=404,
            )

        try:
            await asyncio.to_thread(wake, req.mac, iface, settings.wol_port)
        except InvalidMacAddress as exc:
            return JSONResponse({"error": "Invalid MAC address", "details": str(exc)}, status_code=400)
        except WakeError as exc:
            return JSONResponse({"error": "WOL send failed", "details": str(exc)}, status_code=500)

        return JSONResponse(
            {
                "success": True,
                "message": f"WOL sent to {req.mac} via {iface.name}",
                "interface": iface.name,
            }
        )

    @app.post("/wake-all")
    async def post_wake_all(req: Optional[WakeAllRequest] = None) -> JSONResponse:
        if req is None or not req.mac:
            return JSONResponse({"error": "MAC address required"}, status_code=400)

        selection = _net().selection
        results = await wake_all(req.mac, selection.local, selection.docker, settings.wol_port)
        success = any(r.success for r in results.values())
        return JSONResponse(
            {"success": success, "results": {k: r.to_dict() for k, r in results.items()}},
            status_code=200 if success else 500,
        )

    return app
