"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# Scoring
STANDARD_BLOCK_MINUTES = 120
BLOCK_PERCENTAGE = 100
DEDUCTION_STEP_MINUTES = 5
DEDUCTION_STEP_PERCENTAGE = 5

# Submission window
SUBMISSION_WINDOW_DAYS = 3
WINDOW_CLOSED = -1

# Events
DEFAULT_MINIMUM_MINUTES_PER_WEEK = 240
DEFAULT_PASS_MARK = 75
SKIPPED_CUMULATIVE = 100.0
