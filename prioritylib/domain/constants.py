"""Business rule constants for task records, classification and rating."""

MIN_BODY_LENGTH = 1
MAX_BODY_LENGTH = 5000
MAX_TITLE_LENGTH = 200

DEFAULT_IMPORTANCE_SCORE = 1000.0

# Classification
URGENT_THRESHOLD_HOURS = 24.0
IMPORTANT_SCORE_THRESHOLD = 1200.0

# Pairwise rating
RATING_K_FACTOR = 32.0
RATING_SCALE = 400.0

# Display
DISPLAY_TITLE_LENGTH = 20
TRIMMED_BODY_LENGTH = 200
