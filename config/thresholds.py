"""
Recognition and attendance thresholds
"""
import os

# ============================================================================
# RECOGNITION
# ============================================================================
MATCH_THRESHOLD = float(os.getenv('MATCH_THRESHOLD', '0.6'))  # Max Euclidean distance
DETECTION_SCORE_THRESHOLD = float(os.getenv('DETECTION_SCORE_THRESHOLD', '0.3'))

# ============================================================================
# ATTENDANCE PERCENTAGE (strict <)
# ============================================================================
LOW_ATTENDANCE_THRESHOLD = float(os.getenv('LOW_ATTENDANCE_THRESHOLD', '75'))
CRITICAL_ATTENDANCE_THRESHOLD = float(os.getenv('CRITICAL_ATTENDANCE_THRESHOLD', '50'))
