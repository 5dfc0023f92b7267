#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
ZenHabit - entry point
Starts the habit dashboard server

Version: 1.0.0
"""

import argparse
import logging
import sys

from config import config
from utils.logger import setup_logger

logger = logging.getLogger(__name__)

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Run the ZenHabit dashboard')
    parser.add_argument('--host', default=config.server.host, help='Host to bind')
    parser.add_argument('--port', type=int, default=config.server.port, help='Port to bind')
    parser.add_argument('--dev', action='store_true', help='Development mode')
    parser.add_argument('--reload', action='store_true', help='Auto-reload on code changes')
    return parser.parse_args(argv)

def main(argv=None) -> int:
    args = parse_args(argv)

    config.ensure_directories()
    setup_logger(config)
    logger.info(f"🚀 ZenHabit starting ({config.environment.value})")
    logger.debug(f"Configuration: {config.to_dict()}")

    from dashboard.app import run_dashboard

    try:
        run_dashboard(host=args.host, port=args.port, reload=args.reload,
                      dev=args.dev or config.is_development())
    except KeyboardInterrupt:
        logger.info("👋 Stopped by user")
    return 0

if __name__ == "__main__":
    sys.exit(main())
