"""
Notification senders: e-mail (SMTP), SMS (Twilio) and Telegram

Each sender's send() returns True when a message went out and False when the
channel or the recipient address is not configured. Delivery failures raise
NotificationError.
"""
import logging
import smtplib
from email.message import EmailMessage

import httpx

from config import settings
from core.errors import NotificationError

logger = logging.getLogger(__name__)


def format_message(identity, subject, pct):
    return (
        f"Attendance alert: {identity} has {pct:.1f}% attendance in {subject}. "
        f"Please ensure regular attendance."
    )


class EmailSender:
    channel = 'email'

    def __init__(self, host=None, port=None, user=None, password=None, sender=None,
                 timeout=None):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.user = settings.SMTP_USER if user is None else user
        self.password = settings.SMTP_PASSWORD if password is None else password
        self.sender = sender or settings.EMAIL_SENDER or self.user
        self.timeout = timeout or settings.NOTIFY_TIMEOUT

    def send(self, identity, subject, pct, recipient):
        if not self.user or not self.password:
            logger.warning("Email config missing: SMTP_USER / SMTP_PASSWORD not set")
            return False
        if not recipient.email:
            logger.warning("No e-mail address for %s, skipping", identity)
            return False

        msg = EmailMessage()
        msg['Subject'] = f"Low attendance in {subject}: {identity}"
        msg['From'] = self.sender
        msg['To'] = recipient.email
        msg.set_content(format_message(identity, subject, pct))

        try:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as smtp:
                smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Email to {recipient.email} failed: {e}") from e

        logger.info("Email sent to %s for %s/%s", recipient.email, identity, subject)
        return True


class SmsSender:
    channel = 'sms'
    api_url = 'https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json'

    def __init__(self, account_sid=None, auth_token=None, from_number=None, timeout=None):
        self.account_sid = settings.TWILIO_ACCOUNT_SID if account_sid is None else account_sid
        self.auth_token = settings.TWILIO_AUTH_TOKEN if auth_token is None else auth_token
        self.from_number = settings.TWILIO_FROM_NUMBER if from_number is None else from_number
        self.timeout = timeout or settings.NOTIFY_TIMEOUT

    def send(self, identity, subject, pct, recipient):
        if not self.account_sid or not self.auth_token or not self.from_number:
            logger.warning("SMS config missing: Twilio credentials not set")
            return False
        if not recipient.phone:
            logger.warning("No phone number for %s, skipping", identity)
            return False

        url = self.api_url.format(sid=self.account_sid)
        payload = {
            'From': self.from_number,
            'To': recipient.phone,
            'Body': format_message(identity, subject, pct),
        }
        try:
            resp = httpx.post(url, data=payload, auth=(self.account_sid, self.auth_token),
                              timeout=self.timeout)
        except httpx.HTTPError as e:
            raise NotificationError(f"SMS to {recipient.phone} failed: {e}") from e

        if resp.status_code >= 300:
            raise NotificationError(f"SMS failed {resp.status_code}: {resp.text}")

        logger.info("SMS sent to %s for %s/%s", recipient.phone, identity, subject)
        return True


class TelegramSender:
    """Posts to one configured chat; the recipient only labels the message"""
    channel = 'telegram'

    def __init__(self, token=None, chat_id=None, timeout=None):
        self.token = settings.TELEGRAM_BOT_TOKEN if token is None else token
        self.chat_id = settings.TELEGRAM_CHAT_ID if chat_id is None else chat_id
        self.timeout = timeout or settings.NOTIFY_TIMEOUT

    def send(self, identity, subject, pct, recipient):
        if not self.token or not self.chat_id:
            logger.warning("Telegram config missing: token or chat ID not set")
            return False

        text = f"ATTENDANCE ALERT\n\n{format_message(identity, subject, pct)}"
        if recipient.email or recipient.phone:
            text += f"\nContact: {recipient.email or recipient.phone}"

        url = f"https://api.telegram.org/bot{self.token}/sendMessage"
        try:
            resp = httpx.post(url, json={'chat_id': self.chat_id, 'text': text},
                              timeout=self.timeout)
        except httpx.HTTPError as e:
            raise NotificationError(f"Telegram error: {e}") from e

        if resp.status_code != 200:
            raise NotificationError(f"Telegram failed {resp.status_code}: {resp.text}")
        return True


SENDERS = {
    EmailSender.channel: EmailSender,
    SmsSender.channel: SmsSender,
    TelegramSender.channel: TelegramSender,
}


def build_senders(channels):
    """Instantiate senders for channel names such as ['email', 'sms']"""
    senders = {}
    for name in channels:
        key = name.strip().lower()
        if key not in SENDERS:
            raise ValueError(f"Unknown notification channel: {name!r}")
        senders[key] = SENDERS[key]()
    return senders
