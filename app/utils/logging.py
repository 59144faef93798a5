# =============================================
# File: app/utils/logging.py
# Purpose: Loguru file sink for service logs
# =============================================
import os

from loguru import logger

LOG_FILE = os.getenv("LOG_FILE", "logs/app.log")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logger.add(LOG_FILE, rotation="10 MB", level=LOG_LEVEL)
