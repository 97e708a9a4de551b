#!/usr/bin/env python3
"""
Entry point for the Court Booking application.
"""

import logging
import os

import uvicorn

from court_booking.config import LOG_LEVEL

if __name__ == "__main__":
    logging.basicConfig(
        level=LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "court_booking.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=int(os.getenv("API_PORT", "8000")),
        reload=os.getenv("API_RELOAD", "false").lower() == "true",
        log_level=LOG_LEVEL.lower(),
    )
