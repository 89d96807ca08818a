"""
Configuration
=============
Loads environment variables from .env file using python-dotenv.

Environment Variables:
    INFER_BINARY           — Analyzer executable name or path (default: infer)
    DOCKER_BINARY          — Docker CLI used for containerized runs (default: docker)
    DOCKER_IMAGE           — Image used for containerized runs (default: facebook/infer:latest)
    REPORT_RELATIVE_PATH   — Report location relative to the project root
                             (default: infer-out/report.json)
    PROBE_TIMEOUT_SECONDS  — Bounded wait for the version checks (default: 10)
    SHOW_TRACE             — Expand per-step bug traces into findings (default: false)
    WORKER_POOL_SIZE       — Threads in the host worker pool (default: 2)
    MESSAGE_LOG_LIMIT      — Host messages kept for /status (default: 200)
    LOG_DIR                — Directory for the daily log file (default: logs)
    LOG_LEVEL              — Root log level name (default: INFO)

Timeout Philosophy:
    Only the installation probes are time-bounded. The analyzer run itself
    has no timeout: a full build of a large project can legitimately take
    a long time, and the run is never cancelled once started.
"""
import os
from dotenv import load_dotenv

load_dotenv()

INFER_BINARY = os.getenv("INFER_BINARY", "infer")
DOCKER_BINARY = os.getenv("DOCKER_BINARY", "docker")
DOCKER_IMAGE = os.getenv("DOCKER_IMAGE", "facebook/infer:latest")
REPORT_RELATIVE_PATH = os.getenv("REPORT_RELATIVE_PATH", os.path.join("infer-out", "report.json"))

# Version-check wait in seconds (native infer and docker daemon)
PROBE_TIMEOUT_SECONDS = int(os.getenv("PROBE_TIMEOUT_SECONDS", 10))

SHOW_TRACE = os.getenv("SHOW_TRACE", "false").lower() == "true"

# Host worker pool
WORKER_POOL_SIZE = int(os.getenv("WORKER_POOL_SIZE", 2))
MESSAGE_LOG_LIMIT = int(os.getenv("MESSAGE_LOG_LIMIT", 200))

LOG_DIR = os.getenv("LOG_DIR", "logs")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
