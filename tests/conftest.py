"""
Shared test configuration.

Environment is set before any cardvault module is imported: loggers are
configured at import time and must not write log files during tests.
"""
import os
import sys
from pathlib import Path

os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("LOG_LEVEL", "WARNING")

# Add project root and this directory (for fakes.py) to path
TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(TESTS_DIR.parent))
sys.path.insert(0, str(TESTS_DIR))
