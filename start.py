#!/usr/bin/env python3
"""
Startup script that runs migrations before starting the server
"""
import os
import subprocess

from core.logging import setup_logger

logger = setup_logger("start")


def run_migrations():
    """Run Alembic migrations"""
    logger.info("Running database migrations...")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            check=True,
            capture_output=True,
            text=True
        )
        logger.info("Migrations completed successfully")
        if result.stdout:
            logger.info(result.stdout)
        return True
    except subprocess.CalledProcessError as e:
        logger.error(f"Migrations failed: {e.stderr}")
        return False


def start_server():
    """Start the FastAPI server"""
    port = os.getenv("PORT", "10000")
    logger.info(f"Starting FastAPI server on port {port}...")
    subprocess.run([
        "uvicorn",
        "main:app",
        "--host", "0.0.0.0",
        "--port", port
    ])


if __name__ == "__main__":
    # Run migrations first
    if not run_migrations():
        logger.warning("Migrations failed, but starting server anyway...")

    start_server()
