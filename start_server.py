#!/usr/bin/env python3
"""
Startup script for the Teamboard API
This script starts the FastAPI server with the configured host, port and reload flag
"""

import uvicorn

from teamboard.config.settings import settings


def main():
    print("Starting Teamboard API Server...")
    print(f"Host: {settings.HOST}")
    print(f"Port: {settings.PORT}")
    print(f"Reload: {settings.RELOAD}")
    print(f"Database: {'PostgreSQL' if settings.is_postgres() else 'SQLite' if settings.is_sqlite() else 'other'}")
    print("=" * 50)

    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower()
    )


if __name__ == "__main__":
    main()
