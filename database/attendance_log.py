import csv
import os
import threading
from datetime import datetime

from config import settings
from core.errors import StoreError
from core.models import AttendanceEvent

HEADER = ['Timestamp', 'Name', 'Subject', 'Status']


class AttendanceLogger:
    """Append-only CSV attendance log"""

    def __init__(self, log_file=None):
        self.log_file = log_file or settings.ATTENDANCE_LOG_FILE
        self._lock = threading.Lock()

    def _ensure_file(self):
        directory = os.path.dirname(self.log_file)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.log_file):
            with open(self.log_file, 'w', newline='', encoding='utf-8') as f:
                csv.writer(f).writerow(HEADER)

    def append(self, event):
        try:
            with self._lock:
                self._ensure_file()
                with open(self.log_file, 'a', newline='', encoding='utf-8') as f:
                    writer = csv.writer(f)
                    writer.writerow([
                        event.timestamp.isoformat(),
                        event.identity,
                        event.subject or '',
                        event.status or '',
                    ])
        except OSError as e:
            raise StoreError(f"Error writing attendance log {self.log_file}: {e}") from e

    def list_events(self):
        """All events, newest first"""
        if not os.path.exists(self.log_file):
            return []

        events = []
        try:
            with open(self.log_file, 'r', newline='', encoding='utf-8') as f:
                reader = csv.reader(f)
                next(reader, None)
                for row in reader:
                    if len(row) < 2:
                        continue
                    events.append(AttendanceEvent(
                        identity=row[1],
                        timestamp=datetime.fromisoformat(row[0]),
                        subject=(row[2] if len(row) > 2 else '') or None,
                        status=(row[3] if len(row) > 3 else '') or None,
                    ))
        except (OSError, ValueError) as e:
            raise StoreError(f"Error reading attendance log {self.log_file}: {e}") from e

        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events
