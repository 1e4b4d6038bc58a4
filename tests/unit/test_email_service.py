"""Tests for outgoing email."""
from unittest.mock import MagicMock, patch

from app.services.email_service import send_email, send_verification_email


def test_send_email_skipped_when_not_configured(app):
    with patch('app.services.email_service.smtplib.SMTP') as smtp:
        result = send_email("to@example.com", "Subject", "<p>Hi</p>")

    assert result["success"] is False
    smtp.assert_not_called()


def test_send_email_uses_smtp_settings(app):
    app.config.update(MAIL_USERNAME="mailer", MAIL_PASSWORD="secret", MAIL_SERVER="smtp.test", MAIL_PORT=2525)
    server = MagicMock()
    with patch('app.services.email_service.smtplib.SMTP') as smtp:
        smtp.return_value.__enter__.return_value = server
        result = send_email("to@example.com", "Subject", "<p>Hi</p>", body_text="Hi")

    assert result == {"success": True, "error": None}
    smtp.assert_called_once_with("smtp.test", 2525)
    server.starttls.assert_called_once()
    server.login.assert_called_once_with("mailer", "secret")
    assert server.sendmail.call_args.args[1] == "to@example.com"


def test_send_email_reports_smtp_failure(app):
    app.config.update(MAIL_USERNAME="mailer", MAIL_PASSWORD="secret")
    with patch('app.services.email_service.smtplib.SMTP', side_effect=OSError("connection refused")):
        result = send_email("to@example.com", "Subject", "<p>Hi</p>")

    assert result["success"] is False
    assert "connection refused" in result["error"]


def test_verification_email_contains_code(app):
    with patch('app.services.email_service.send_email') as send:
        send.return_value = {"success": True, "error": None}
        send_verification_email("to@example.com", "Alice", "123456")

    to_email, subject, html = send.call_args.args
    assert to_email == "to@example.com"
    assert subject == "Email Verification OTP"
    assert "123456" in html
    assert "10 minutes" in html
