#!/usr/bin/env python3
"""
Run script for the CarShop API.
This script launches the FastAPI server with every service mounted as a router.
"""
import sys
import traceback

import uvicorn

from carshop.config import get_settings

if __name__ == "__main__":
    settings = get_settings()
    try:
        print("Starting CarShop API server...")
        print(f"Access the API at http://localhost:{settings.port}{settings.api_prefix}")
        print(f"API documentation at http://localhost:{settings.port}/docs")

        uvicorn.run(
            "carshop.main:app",
            host=settings.host,
            port=settings.port,
            log_level=settings.log_level.lower()
        )
    except Exception as e:
        print(f"Error starting server: {e}")
        traceback.print_exc()
        sys.exit(1)
