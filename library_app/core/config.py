import os
import logging

DATABASE_URL = os.getenv("LIBRARY_DB", "sqlite:///./library.db")
LOG_LEVEL = os.getenv("LIBRARY_LOG", "INFO")

LOAN_PERIOD_DAYS = int(os.getenv("LIBRARY_LOAN_DAYS", "7"))
CRITICAL_OVERDUE_DAYS = int(os.getenv("LIBRARY_CRITICAL_DAYS", "3"))

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
ASSISTANT_MODEL = os.getenv("LIBRARY_ASSISTANT_MODEL", "gpt-4o-mini")

logging.basicConfig(level=LOG_LEVEL,
                    format="%(asctime)s %(levelname)s %(name)s - %(message)s")
logger = logging.getLogger("library")
