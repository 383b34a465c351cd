"""Configuration constants for reference reconciliation."""
import os

# === Confidence per tier ===
EXACT_CONFIDENCE = 1.0
NORMALIZED_CONFIDENCE = 0.95

# === Fuzzy matching ===
DEFAULT_CONFIDENCE_THRESHOLD = 0.8
DEFAULT_MAX_SUGGESTIONS = int(os.getenv("RECON_MAX_SUGGESTIONS", "3"))
# Candidates scoring below this never surface, not even as suggestions
FUZZY_CANDIDATE_FLOOR = float(os.getenv("RECON_FUZZY_FLOOR", "0.1"))
# Extra candidates pulled past max_suggestions so the accepted match can be dropped
FUZZY_CANDIDATE_SLACK = 5

# === Suggestion reason bands ===
REASON_BANDS = (
    (0.9, "Very similar spelling"),
    (0.8, "Similar spelling"),
    (0.7, "Possible match"),
)

# === Batch ===
DEFAULT_BATCH_SIZE = int(os.getenv("RECON_BATCH_SIZE", "1000"))

# === Validation ===
ENUM_SUGGESTION_THRESH = 0.6
ENUM_MAX_SUGGESTIONS = 5
ENUM_MAX_OPTIONS = 10
LOW_CONFIDENCE_ERROR_MARGIN = 0.2
COMMON_SUGGESTIONS_LIMIT = 5
VALIDATION_BATCH_SIZE = 100
