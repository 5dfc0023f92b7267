#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit Dashboard - FastAPI Application
Weekly habit board, charts data and AI insights

Version: 1.0.0
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import uvicorn

from config import AppConfig, config as default_config
from core.ai_service import InsightCoordinator
from core.tracker import HabitTracker
from dashboard.api import charts, habits, insights
from dashboard.dependencies import init_insights, init_tracker
from shared.models import HealthCheck

logger = logging.getLogger(__name__)

APP_VERSION = "1.0.0"

def create_app(tracker: Optional[HabitTracker] = None,
               coordinator: Optional[InsightCoordinator] = None,
               app_config: Optional[AppConfig] = None) -> FastAPI:
    """Build the dashboard; components not passed in are created at startup"""
    app_config = app_config or default_config

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("🚀 Starting ZenHabit Dashboard...")
        app.state.start_time = time.time()

        if app.state.tracker is None:
            app_config.ensure_directories()
            app.state.tracker = init_tracker(app_config)
        if app.state.insights is None:
            app.state.insights = init_insights(app_config)

        logger.info(f"🌐 Dashboard available at http://{app_config.server.host}:{app_config.server.port}")
        logger.info("✅ Dashboard ready")

        yield

        logger.info("🛑 Stopping Dashboard...")
        app.state.insights.cancel()
        logger.info("✅ Resources released")

    app = FastAPI(
        title="ZenHabit Dashboard",
        description="Personal habit tracker with weekly charts and AI insights",
        version=APP_VERSION,
        docs_url="/api/docs" if app_config.server.debug_mode else None,
        redoc_url="/api/redoc" if app_config.server.debug_mode else None,
        openapi_url="/api/openapi.json" if app_config.server.debug_mode else None,
        lifespan=lifespan
    )
    app.state.tracker = tracker
    app.state.insights = coordinator
    app.state.start_time = time.time()

    # ===== MIDDLEWARE =====

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_config.server.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log method, path, status and processing time"""
        start_time = time.time()
        client_ip = request.headers.get("X-Forwarded-For", request.client.host if request.client else "-")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.exception(f"❌ Request failed: {request.method} {request.url.path}: {e} ({process_time:.3f}s)")
            return JSONResponse(status_code=500, content={"detail": "Internal server error"})

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} "
            f"- {response.status_code} "
            f"- {process_time:.3f}s "
            f"- {client_ip}"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response

    # ===== ROUTES =====

    app.include_router(habits.router)
    app.include_router(charts.router)
    app.include_router(insights.router)

    @app.get("/health", response_model=HealthCheck)
    async def health_check(request: Request):
        tracker = request.app.state.tracker
        details = None
        if tracker is not None:
            details = tracker.get_stats()
            if tracker.store is not None:
                details["store"] = tracker.store.get_stats()
        degraded = tracker is None or bool(
            details and (details.get("last_save_error") or details.get("last_load_error"))
        )
        return HealthCheck(
            status="degraded" if degraded else "healthy",
            service="zenhabit-dashboard",
            version=APP_VERSION,
            timestamp=time.time(),
            details=details
        )

    return app

app = create_app()

def run_dashboard(host: str, port: int, reload: bool = False, dev: bool = False):
    """Run the dashboard with uvicorn"""
    uvicorn.run(
        "dashboard.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if dev else "info",
        access_log=dev,
        server_header=False,
        date_header=False
    )
