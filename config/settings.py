"""
Global settings for Face Attendance Tracker
"""
import os

from dotenv import load_dotenv

load_dotenv('.env.local')
load_dotenv()


def _env_bool(key, default):
    return os.getenv(key, '1' if default else '0').strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(key, default):
    raw = os.getenv(key, default)
    return [item.strip() for item in raw.split(',') if item.strip()]


# ============================================================================
# STORAGE BACKEND
# ============================================================================
STORE_BACKEND = os.getenv('STORE_BACKEND', 'supabase')  # 'supabase' or 'local'

SUPABASE_URL = os.getenv('SUPABASE_URL', '')
SUPABASE_KEY = os.getenv('SUPABASE_KEY', '')

# Store only student_name/created_at unless the attendance table has subject/status
EVENT_DETAILS_ENABLED = _env_bool('EVENT_DETAILS_ENABLED', False)

# ============================================================================
# LOCAL DATABASE PATHS
# ============================================================================
ROSTER_DB_PATH = os.getenv('ROSTER_DB_PATH', 'data/roster.json')
ATTENDANCE_LOG_FILE = os.getenv('ATTENDANCE_LOG_FILE', 'data/attendance.csv')
STATS_DB_PATH = os.getenv('STATS_DB_PATH', 'data/attendance_stats.json')

# ============================================================================
# FACE DETECTION
# ============================================================================
DETECTION_INPUT_SIZE = int(os.getenv('DETECTION_INPUT_SIZE', '416'))  # Longer side, pixels
EMBEDDING_SIZE = 128

# ============================================================================
# ATTENDANCE POLICY
# ============================================================================
ATTENDANCE_WINDOW_ENFORCED = _env_bool('ATTENDANCE_WINDOW_ENFORCED', False)
LATE_MARKING_ENABLED = _env_bool('LATE_MARKING_ENABLED', False)

# ============================================================================
# NOTIFICATIONS
# ============================================================================
LOW_ATTENDANCE_CHANNELS = _env_list('LOW_ATTENDANCE_CHANNELS', 'email')
CRITICAL_ATTENDANCE_CHANNELS = _env_list('CRITICAL_ATTENDANCE_CHANNELS', 'email,sms')

SMTP_HOST = os.getenv('SMTP_HOST', 'smtp.gmail.com')
SMTP_PORT = int(os.getenv('SMTP_PORT', '465'))
SMTP_USER = os.getenv('SMTP_USER', '')
SMTP_PASSWORD = os.getenv('SMTP_PASSWORD', '')
EMAIL_SENDER = os.getenv('EMAIL_SENDER', SMTP_USER)

TWILIO_ACCOUNT_SID = os.getenv('TWILIO_ACCOUNT_SID', '')
TWILIO_AUTH_TOKEN = os.getenv('TWILIO_AUTH_TOKEN', '')
TWILIO_FROM_NUMBER = os.getenv('TWILIO_FROM_NUMBER', '')

TELEGRAM_BOT_TOKEN = os.getenv('TELEGRAM_BOT_TOKEN', '')
TELEGRAM_CHAT_ID = os.getenv('TELEGRAM_CHAT_ID', '')

NOTIFY_TIMEOUT = float(os.getenv('NOTIFY_TIMEOUT', '10'))  # Seconds per HTTP/SMTP call

# ============================================================================
# LOGGING
# ============================================================================
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE = os.getenv('LOG_FILE', '')  # Empty = console only
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5
