"""Centralized constants for memora.

All magic numbers and configuration defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Time ----------
SECONDS_PER_DAY = 86400.0

# ---------- SM-2 ----------
DEFAULT_EASE = 2.5
MIN_EASE = 1.3
DEFAULT_INTERVAL_DAYS = 1
PASSING_QUALITY = 3  # quality < 3 is a lapse
FIRST_INTERVAL_DAYS = 1
SECOND_INTERVAL_DAYS = 6
MATURE_REPETITIONS = 3

# ---------- Quality Classifier ----------
MAX_QUALITY = 5
INSTANT_RECALL_MS = 2000
QUICK_RECALL_MS = 4000

# ---------- Memory Strength ----------
DUE_STRENGTH = 0.5  # Strength at the due instant (interval = half-life)
WEAK_STRENGTH_THRESHOLD = 0.8

# ---------- Queue / Dashboard ----------
DEFAULT_QUEUE_LIMIT = 20
DEFAULT_SESSION_SIZE = 7
DEFAULT_HEAT_MAP_DAYS = 30
