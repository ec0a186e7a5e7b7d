"""Unit tests for SMTP delivery with retry"""

import pytest
import smtplib
from email.message import EmailMessage
from unittest.mock import MagicMock, patch
from enrollment_gateway.infrastructure.clients.mail import MailClient


@pytest.fixture
def message() -> EmailMessage:
    message = EmailMessage()
    message["From"] = "support@example.com"
    message["To"] = "costa@trollhair.com"
    message["Subject"] = "Test"
    message.set_content("Hi")
    return message


@pytest.fixture
def mail_client() -> MailClient:
    client = MailClient(host="smtp.example.com", port=587, username="user", password="secret", use_tls=True)
    client.max_retries = 3
    client.backoff_base = 0.5
    return client


@patch("enrollment_gateway.utils.retry.time.sleep")
@patch("smtplib.SMTP")
def test_send_delivers_once(mock_smtp: MagicMock, mock_sleep: MagicMock, mail_client, message):
    """Test TLS, login and delivery on the first attempt"""
    smtp = mock_smtp.return_value.__enter__.return_value

    mail_client.send(message)

    mock_smtp.assert_called_once_with("smtp.example.com", 587, timeout=mail_client.timeout)
    smtp.starttls.assert_called_once()
    smtp.login.assert_called_once_with("user", "secret")
    smtp.send_message.assert_called_once_with(message)
    mock_sleep.assert_not_called()


@patch("enrollment_gateway.utils.retry.time.sleep")
@patch("smtplib.SMTP")
def test_send_retries_transient_failures(mock_smtp: MagicMock, mock_sleep: MagicMock, mail_client, message):
    """Test exponential backoff between attempts"""
    smtp = mock_smtp.return_value.__enter__.return_value
    smtp.send_message.side_effect = [smtplib.SMTPServerDisconnected("gone"), OSError("reset"), {}]

    mail_client.send(message)

    assert smtp.send_message.call_count == 3
    assert [c.args[0] for c in mock_sleep.call_args_list] == [0.5, 1.0]


@patch("enrollment_gateway.utils.retry.time.sleep")
@patch("smtplib.SMTP")
def test_send_gives_up_after_max_retries(mock_smtp: MagicMock, mock_sleep: MagicMock, mail_client, message):
    mock_smtp.side_effect = ConnectionRefusedError("refused")

    with pytest.raises(ConnectionRefusedError):
        mail_client.send(message)

    assert mock_smtp.call_count == 3
    assert mock_sleep.call_count == 2


@patch("enrollment_gateway.utils.retry.time.sleep")
@patch("smtplib.SMTP")
def test_no_login_without_credentials(mock_smtp: MagicMock, mock_sleep: MagicMock, message):
    client = MailClient(host="localhost", port=25, username="", password="", use_tls=False)
    smtp = mock_smtp.return_value.__enter__.return_value

    client.send(message)

    smtp.starttls.assert_not_called()
    smtp.login.assert_not_called()
