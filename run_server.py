#!/usr/bin/env python3
"""
App Launcher Channel Server
Starts the local HTTP method channel
"""

import logging

import uvicorn

from launcher.config import get_config
from launcher.server import app

if __name__ == "__main__":
    config = get_config()
    logging.basicConfig(
        level=str(config.get("system.log_level", "INFO")).upper(),
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    host = config.get("server.host", "127.0.0.1")
    port = int(config.get("server.port", 8765))

    print("\n" + "=" * 80)
    print("APP LAUNCHER CHANNEL - SERVER RUNNING")
    print("=" * 80)
    print(f"\nStarting server on http://{host}:{port}")
    print("Press Ctrl+C to stop\n")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info",
    )
