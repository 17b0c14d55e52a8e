"""Centralized constants for vocab-srs.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Quality ----------
MIN_QUALITY = 0
MAX_QUALITY = 5
PASS_THRESHOLD = 3

# ---------- Ease factor ----------
DEFAULT_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
MAX_EASE_FACTOR = 2.5

# ---------- Intervals ----------
MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 1440
MINUTES_PER_WEEK = 10080
MINUTES_PER_MONTH = 43200
MIN_INTERVAL_MINUTES = 10
MAX_INTERVAL_MINUTES = 525600  # 365 days
SNAP_THRESHOLD_MINUTES = 120

# ---------- History ----------
HISTORY_LIMIT = 20
CONSISTENCY_WINDOW = 5

# ---------- Response time (ms) ----------
EXPECTED_RESPONSE_MS = {"easy": 3000, "medium": 5000, "hard": 8000}
DEFAULT_DIFFICULTY = "medium"

# ---------- Optimal review time ----------
DEFAULT_REVIEW_HOUR = 9
DEFAULT_REVIEW_MINUTE = 0

# ---------- Adaptive quality bonus ----------
QUALITY_BONUS = {0: -0.8, 1: -0.54, 2: -0.32, 3: -0.14, 4: 0.0, 5: 0.15}

# Carried in configuration, not referenced by the scheduling formulas.
DEFAULT_WEIGHTS = (
    0.4, 0.6, 2.4, 5.8, 4.93, 0.94, 0.86, 0.01, 1.49,
    0.14, 0.94, 2.18, 0.05, 0.34, 1.26, 0.29, 2.61,
)
REQUEST_RETENTION = 0.9

# ---------- Sessions ----------
SECONDS_PER_CARD = 30
MIN_BATCH_SIZE = 5
MAX_BATCH_SIZE = 50

READY_NOW = "Ready now"
