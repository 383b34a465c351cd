"""Configuration constants for import-column to target-field mapping."""

# === Confidence per match type ===
EXACT_CONFIDENCE = 1.0
SNAKE_CASE_CONFIDENCE = 0.9
CAMEL_CASE_CONFIDENCE = 0.85

# === Fuzzy ===
# Raw similarity is scaled so a fuzzy mapping never outranks a structural one
FUZZY_CONFIDENCE_SCALE = 0.7
FUZZY_MIN_CONFIDENCE = 0.3
