#!/usr/bin/env python3
"""Startup script for the reaction role bot."""

import uvicorn
from config import settings


def main():
    """Main function to start the server."""
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        log_level="info",
        reload=False
    )


if __name__ == "__main__":
    main()
