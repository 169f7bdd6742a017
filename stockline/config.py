"""Configuration and settings."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Paths
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "output"

# Ensure directories exist
DATA_DIR.mkdir(parents=True, exist_ok=True)
OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

# Database
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'stockline.sqlite'}")

# Logging
LOG_DIR = OUTPUT_DIR / "logs"
LOG_FILE = LOG_DIR / "stockline.jsonl"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
VERBOSE_LOGGING = os.getenv("VERBOSE_LOGGING", "false").lower() == "true"

# Ensure log directory exists
LOG_DIR.mkdir(parents=True, exist_ok=True)

# Allocation accounting
UNASSIGNED_BATCH_ID = os.getenv("UNASSIGNED_BATCH_ID", "UNASSIGNED")
ACTIVE_BATCH_STATUS = "in_progress"

# Health reports
TOP_SHORTAGES_LIMIT = int(os.getenv("TOP_SHORTAGES_LIMIT", "10"))
# A component counts as excess when on-hand exceeds remaining need by this factor
EXCESS_FACTOR = float(os.getenv("EXCESS_FACTOR", "2.0"))
# Margin below this fraction of the remaining need downgrades a batch to warning
LOW_MARGIN_RATIO = float(os.getenv("LOW_MARGIN_RATIO", "0.1"))

# Fan-out of independent per-record updates (zero stock, global health)
FANOUT_CONCURRENCY = int(os.getenv("FANOUT_CONCURRENCY", "8"))

# HTTP API
API_PORT = int(os.getenv("API_PORT", "8000"))

# OpenTelemetry
TRACING_ENABLED = os.getenv("TRACING_ENABLED", "false").lower() == "true"
OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/traces")
OTLP_API_KEY = os.getenv("OTLP_API_KEY", "")
SERVICE_NAME = os.getenv("SERVICE_NAME", "stockline")
DEPLOYMENT_ENVIRONMENT = os.getenv("DEPLOYMENT_ENVIRONMENT", "development")
