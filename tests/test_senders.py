from unittest.mock import MagicMock, patch

import httpx
import pytest

from core.errors import NotificationError
from core.models import Recipient
from core.senders import EmailSender, SmsSender, TelegramSender, build_senders


def test_email_sender_sends_over_smtp_ssl():
    sender = EmailSender(host='smtp.test', port=465, user='bot@test', password='secret')
    with patch('core.senders.smtplib.SMTP_SSL') as smtp_cls:
        smtp = smtp_cls.return_value.__enter__.return_value
        assert sender.send('Alice', 'Math', 60.0, Recipient(email='parent@example.com'))

    smtp.login.assert_called_once_with('bot@test', 'secret')
    msg = smtp.send_message.call_args[0][0]
    assert msg['To'] == 'parent@example.com'
    assert '60.0%' in msg.get_content()


def test_email_sender_without_credentials_skips():
    sender = EmailSender(user='', password='')
    with patch('core.senders.smtplib.SMTP_SSL') as smtp_cls:
        assert sender.send('Alice', 'Math', 60.0, Recipient(email='p@x')) is False
    smtp_cls.assert_not_called()


def test_email_sender_without_address_skips():
    sender = EmailSender(user='bot@test', password='secret')
    assert sender.send('Alice', 'Math', 60.0, Recipient()) is False


def test_email_failure_raises_notification_error():
    sender = EmailSender(user='bot@test', password='secret')
    with patch('core.senders.smtplib.SMTP_SSL', side_effect=OSError('connection refused')):
        with pytest.raises(NotificationError):
            sender.send('Alice', 'Math', 60.0, Recipient(email='p@x'))


def test_sms_sender_posts_to_twilio():
    sender = SmsSender(account_sid='AC1', auth_token='tok', from_number='+1000')
    with patch('core.senders.httpx.post', return_value=MagicMock(status_code=201)) as post:
        assert sender.send('Alice', 'Math', 40.0, Recipient(phone='+1555'))

    url = post.call_args[0][0]
    assert 'AC1' in url
    assert post.call_args.kwargs['data']['To'] == '+1555'
    assert post.call_args.kwargs['auth'] == ('AC1', 'tok')


def test_sms_http_error_raises_notification_error():
    sender = SmsSender(account_sid='AC1', auth_token='tok', from_number='+1000')
    with patch('core.senders.httpx.post', side_effect=httpx.ConnectError('down')):
        with pytest.raises(NotificationError):
            sender.send('Alice', 'Math', 40.0, Recipient(phone='+1555'))


def test_sms_rejected_status_raises_notification_error():
    sender = SmsSender(account_sid='AC1', auth_token='tok', from_number='+1000')
    with patch('core.senders.httpx.post', return_value=MagicMock(status_code=400, text='bad')):
        with pytest.raises(NotificationError):
            sender.send('Alice', 'Math', 40.0, Recipient(phone='+1555'))


def test_telegram_sender_posts_to_chat():
    sender = TelegramSender(token='T', chat_id='42')
    with patch('core.senders.httpx.post', return_value=MagicMock(status_code=200)) as post:
        assert sender.send('Alice', 'Math', 40.0, Recipient(email='p@x'))
    assert post.call_args.kwargs['json']['chat_id'] == '42'
    assert 'Alice' in post.call_args.kwargs['json']['text']


def test_telegram_without_config_skips():
    assert TelegramSender(token='', chat_id='').send('Alice', 'Math', 40.0, Recipient()) is False


def test_build_senders():
    senders = build_senders(['email', ' SMS '])
    assert set(senders) == {'email', 'sms'}
    with pytest.raises(ValueError):
        build_senders(['pigeon'])
