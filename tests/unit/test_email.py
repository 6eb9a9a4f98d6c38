"""Tests for email templates and transports."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from membership_service.models import EmailConfig
from membership_service.services.email_templates import EMAIL_TEMPLATES, render_template
from membership_service.services.email_transport import (
    EmailDeliveryError,
    LoggingEmailTransport,
    SMTPEmailTransport,
    create_email_transport,
)


class TestTemplates:
    """Test template rendering."""

    def test_every_template_has_all_parts(self):
        for name, template in EMAIL_TEMPLATES.items():
            assert set(template) == {"subject", "html", "text"}, name

    def test_render_activation(self):
        subject, html_body, text_body = render_template(
            "subscription_activated",
            {
                "brand": "Membership",
                "name": "Ada Lovelace",
                "plan_name": "Pro Yearly",
                "price": "99.00",
                "currency": "USD",
                "start_date": "January 31, 2026",
            },
        )
        assert subject == "Your Pro Yearly Subscription is Active"
        assert "USD 99.00" in html_body
        assert "January 31, 2026" in text_body
        assert "This message was sent by Membership" in html_body

    def test_html_values_are_escaped(self):
        _, html_body, text_body = render_template(
            "account_suspended", {"brand": "M", "name": "Eve", "reason": "<script>x</script>"}
        )
        assert "<script>" not in html_body
        assert "&lt;script&gt;" in html_body
        assert "<script>x</script>" in text_body

    def test_unknown_template(self):
        with pytest.raises(ValueError, match="Unknown email template"):
            render_template("nope", {})

    def test_missing_placeholder(self):
        with pytest.raises(KeyError):
            render_template("subscription_cancelled", {"brand": "M", "name": "Ada"})


@pytest.fixture
def smtp_config():
    return EmailConfig(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="secret",
        from_email="noreply@example.com",
        from_name="Membership",
        timeout=10,
    )


class TestSMTPTransport:
    """Test SMTP delivery with smtplib patched."""

    @patch("membership_service.services.email_transport.smtplib.SMTP")
    def test_send_uses_starttls_and_login(self, mock_smtp_class, smtp_config):
        server = MagicMock()
        mock_smtp_class.return_value = server

        SMTPEmailTransport(smtp_config).send("ada@example.com", "Hello", "<p>Hi</p>", "Hi")

        mock_smtp_class.assert_called_once_with("smtp.example.com", 587, timeout=10)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        message = server.send_message.call_args.args[0]
        assert message["To"] == "ada@example.com"
        assert message["Subject"] == "Hello"
        assert message["From"] == "Membership <noreply@example.com>"
        assert server.send_message.call_args.kwargs["to_addrs"] == ["ada@example.com"]
        server.quit.assert_called_once()

    @patch("membership_service.services.email_transport.smtplib.SMTP")
    def test_no_login_without_credentials(self, mock_smtp_class):
        server = MagicMock()
        mock_smtp_class.return_value = server
        config = EmailConfig(host="smtp.example.com", use_tls=False)

        SMTPEmailTransport(config).send("a@example.com", "s", "<p>b</p>")

        server.starttls.assert_not_called()
        server.login.assert_not_called()
        server.send_message.assert_called_once()

    @patch("membership_service.services.email_transport.smtplib.SMTP_SSL")
    def test_implicit_tls(self, mock_ssl_class):
        server = MagicMock()
        mock_ssl_class.return_value = server
        config = EmailConfig(host="smtp.example.com", port=465, use_ssl=True)

        SMTPEmailTransport(config).send("a@example.com", "s", "<p>b</p>")

        mock_ssl_class.assert_called_once_with("smtp.example.com", 465, timeout=30)
        server.starttls.assert_not_called()

    @patch("membership_service.services.email_transport.smtplib.SMTP")
    def test_smtp_failure_raises_delivery_error(self, mock_smtp_class, smtp_config):
        server = MagicMock()
        server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
        mock_smtp_class.return_value = server

        with pytest.raises(EmailDeliveryError):
            SMTPEmailTransport(smtp_config).send("a@example.com", "s", "<p>b</p>")
        server.quit.assert_called_once()

    @patch("membership_service.services.email_transport.smtplib.SMTP")
    def test_connection_failure_raises_delivery_error(self, mock_smtp_class, smtp_config):
        mock_smtp_class.side_effect = ConnectionRefusedError("refused")

        with pytest.raises(EmailDeliveryError, match="refused"):
            SMTPEmailTransport(smtp_config).send("a@example.com", "s", "<p>b</p>")

    @patch("membership_service.services.email_transport.smtplib.SMTP")
    def test_closed_transport_rejects_messages(self, mock_smtp_class, smtp_config):
        transport = SMTPEmailTransport(smtp_config)
        transport.close()

        with pytest.raises(EmailDeliveryError, match="closed"):
            transport.send("a@example.com", "s", "<p>b</p>")
        mock_smtp_class.assert_not_called()


class TestLoggingTransport:
    def test_send_logs_and_counts(self):
        transport = LoggingEmailTransport()
        with patch("membership_service.services.email_transport.logger") as mock_logger:
            transport.send("a@example.com", "Subject", "<p>b</p>")

        assert transport.skipped == 1
        assert mock_logger.warning.call_args.args == ("email_skipped",)
        assert mock_logger.warning.call_args.kwargs["to"] == "a@example.com"


class TestTransportFactory:
    def test_smtp_when_host_configured(self, smtp_config):
        assert isinstance(create_email_transport(smtp_config), SMTPEmailTransport)

    def test_logging_without_host(self):
        assert isinstance(create_email_transport(EmailConfig()), LoggingEmailTransport)
        assert isinstance(create_email_transport(None), LoggingEmailTransport)
