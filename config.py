import os

from dotenv import load_dotenv

load_dotenv()

# API Configuration
API_BASE_URL = os.environ.get("EXPLORER_API_BASE_URL", "https://mempool.space/testnet/api").rstrip("/")
API_TIMEOUT = float(os.environ.get("EXPLORER_API_TIMEOUT", 10))

# Redis Configuration
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = int(os.environ.get("REDIS_PORT", 6379))
REDIS_DB = int(os.environ.get("REDIS_DB", 0))
CACHE_TTL = int(os.environ.get("CACHE_TTL", 300))  # 5 minutes cache TTL
MEMPOOL_CACHE_TTL = int(os.environ.get("MEMPOOL_CACHE_TTL", 10))  # mempool changes every few seconds
FEES_CACHE_TTL = int(os.environ.get("FEES_CACHE_TTL", 30))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
