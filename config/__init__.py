"""
Configuration package for Face Attendance Tracker
"""

from .settings import *
from .thresholds import *

__all__ = [
    # Storage
    'STORE_BACKEND',
    'SUPABASE_URL',
    'SUPABASE_KEY',
    'EVENT_DETAILS_ENABLED',
    'ROSTER_DB_PATH',
    'ATTENDANCE_LOG_FILE',
    'STATS_DB_PATH',

    # Face Detection
    'DETECTION_INPUT_SIZE',
    'DETECTION_SCORE_THRESHOLD',
    'EMBEDDING_SIZE',

    # Recognition Thresholds
    'MATCH_THRESHOLD',

    # Attendance
    'ATTENDANCE_WINDOW_ENFORCED',
    'LATE_MARKING_ENABLED',
    'LOW_ATTENDANCE_THRESHOLD',
    'CRITICAL_ATTENDANCE_THRESHOLD',

    # Notifications
    'LOW_ATTENDANCE_CHANNELS',
    'CRITICAL_ATTENDANCE_CHANNELS',
    'SMTP_HOST',
    'SMTP_PORT',
    'SMTP_USER',
    'SMTP_PASSWORD',
    'EMAIL_SENDER',
    'TWILIO_ACCOUNT_SID',
    'TWILIO_AUTH_TOKEN',
    'TWILIO_FROM_NUMBER',
    'TELEGRAM_BOT_TOKEN',
    'TELEGRAM_CHAT_ID',
    'NOTIFY_TIMEOUT',

    # Logging
    'LOG_LEVEL',
    'LOG_FORMAT',
    'LOG_FILE',
    'LOG_MAX_BYTES',
    'LOG_BACKUP_COUNT',
]
