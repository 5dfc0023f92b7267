#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit Dashboard - Dependencies
Providers for the tracker and insight coordinator held on ``app.state``
"""

import logging

from fastapi import HTTPException, Request, status

from config import AppConfig
from core.ai_service import InsightCoordinator, InsightService
from core.database import HabitStore
from core.tracker import HabitTracker
from utils.datetime_utils import today

logger = logging.getLogger(__name__)

# ===== INITIALISATION =====

def init_tracker(app_config: AppConfig) -> HabitTracker:
    """Build the tracker from configuration and load stored habits"""
    logger.info("🔄 Initialising HabitTracker...")
    store = HabitStore.from_config(app_config)
    tracker = HabitTracker(store=store, clock=lambda: today(app_config.timezone))
    count = tracker.load()
    if app_config.storage.auto_backup and count:
        store.create_backup()
    logger.info(f"✅ HabitTracker initialised with {count} habits")
    return tracker

def init_insights(app_config: AppConfig) -> InsightCoordinator:
    logger.info("🔄 Initialising insight service...")
    coordinator = InsightCoordinator(InsightService.from_config(app_config))
    logger.info(f"✅ Insight service ready - OpenAI: {'✅' if coordinator.service.enabled else '❌'}")
    return coordinator

# ===== PROVIDERS =====

def get_tracker(request: Request) -> HabitTracker:
    tracker = getattr(request.app.state, "tracker", None)
    if tracker is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Habit tracker is not initialised"
        )
    return tracker

def get_insights(request: Request) -> InsightCoordinator:
    coordinator = getattr(request.app.state, "insights", None)
    if coordinator is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Insight service is not initialised"
        )
    return coordinator
