# storefront/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("API_URL", "http://localhost:4000")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", 5))

SSE_PATH = os.getenv("SSE_PATH", "/api/sse/events")
SSE_RECONNECT_SECONDS = float(os.getenv("SSE_RECONNECT_SECONDS", 5))

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "file")
STORAGE_PATH = os.getenv("STORAGE_PATH", ".storefront/local_storage.json")
REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")

CLERK_PUBLISHABLE_KEY = os.getenv("CLERK_PUBLISHABLE_KEY", "")
DEMO_PASSWORD = os.getenv("DEMO_PASSWORD", "demo123")

RECENTLY_VIEWED_LIMIT = int(os.getenv("RECENTLY_VIEWED_LIMIT", 12))
QUERY_MAX_RETRIES = int(os.getenv("QUERY_MAX_RETRIES", 3))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./storefront.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
