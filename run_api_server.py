"""
FastAPI Server Startup Script
Run this to start the Invoice Server API
"""

import logging

import uvicorn

from invoice_server.config import get_settings


def main():
    """Start the FastAPI server"""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("🚀 Starting Invoice Server API...")
    print(f"📍 Server will run on: http://{settings.api_host}:{settings.api_port}")
    print(f"📚 API Documentation: http://{settings.api_host}:{settings.api_port}/docs")
    print(f"🔍 Health Check: http://{settings.api_host}:{settings.api_port}/api/health")

    uvicorn.run(
        "invoice_server.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
        access_log=True
    )

if __name__ == "__main__":
    main()
