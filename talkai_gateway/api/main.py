import os
from typing import Optional

import httpx
import uvicorn
from fastapi import FastAPI, Request, Depends
from fastapi.responses import JSONResponse, HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.auth import AccessGate, require_api_key
from ..core.config_manager import ConfigManager
from ..core.logging import logger
from ..services.chat_service import ChatService
from ..services.dashboard_service import DashboardService
from ..services.model_service import ModelService
from ..services.monitoring import StatisticsCollector, LiveRequestLog
from .middleware import RequestLoggerMiddleware


def create_app(
    config_manager: Optional[ConfigManager] = None,
    httpx_client: Optional[httpx.AsyncClient] = None,
    access_gate: Optional[AccessGate] = None
) -> FastAPI:
    """
    Build the gateway application.

    All mutable state (statistics, live request log, access gate, model map)
    hangs off ``app.state``; nothing is shared between app instances.
    """
    app = FastAPI(title="TalkAI Gateway")

    if config_manager is None:
        config_manager = ConfigManager(config_dir=os.getenv("CONFIG_DIR", "config"))
    config = config_manager.get_config()
    logger.configure(debug_mode=config_manager.is_debug_enabled)
    owns_client = httpx_client is None
    if httpx_client is None:
        httpx_client = httpx.AsyncClient(timeout=httpx.Timeout(config.timeout))

    app.state.config_manager = config_manager
    app.state.httpx_client = httpx_client
    app.state.access_gate = access_gate or AccessGate(config_manager.client_api_keys)
    app.state.statistics = StatisticsCollector()
    app.state.live_requests = LiveRequestLog()
    app.state.model_service = ModelService(config_manager)
    app.state.dashboard_service = DashboardService(app.state.statistics, app.state.live_requests)
    app.state.chat_service = ChatService(
        config_manager,
        httpx_client,
        app.state.access_gate,
        app.state.statistics,
        app.state.live_requests
    )

    @app.on_event("startup")
    async def startup_event():
        app.state.config_manager.start_reloader_task()

    @app.on_event("shutdown")
    async def shutdown_event():
        app.state.config_manager.stop_reloader_task()
        if owns_client:
            await app.state.httpx_client.aclose()

    app.add_middleware(RequestLoggerMiddleware)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # ErrorHandler details are already {"error": message}
        if isinstance(exc.detail, dict) and "error" in exc.detail:
            content = exc.detail
        else:
            content = {"error": str(exc.detail)}
        return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.get("/v1/models")
    async def list_models(request: Request, _: Optional[str] = Depends(require_api_key)):
        return request.app.state.model_service.list_models()

    @app.post("/v1/chat/completions")
    async def chat_completions(request: Request):
        # Authentication happens inside the service so failed calls are recorded
        return await request.app.state.chat_service.chat_completions(request)

    if config.dashboard_enabled:
        @app.get("/dashboard", response_class=HTMLResponse)
        async def dashboard(request: Request):
            return request.app.state.dashboard_service.render_page()

        @app.get("/dashboard/stats")
        async def dashboard_stats(request: Request):
            return request.app.state.dashboard_service.get_stats()

        @app.get("/dashboard/requests")
        async def dashboard_requests(request: Request):
            return request.app.state.dashboard_service.get_requests()

        logger.info(f"Dashboard enabled at http://localhost:{config.port}/dashboard")

    return app


app = create_app()


def main():
    config_manager = app.state.config_manager
    config_manager.log_summary()
    port = config_manager.get_config().port
    logger.info(f"Starting server on port {port}")
    uvicorn.run(app, host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
