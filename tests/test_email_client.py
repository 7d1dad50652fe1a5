"""Tests for mail transport selection and delivery error handling."""

from __future__ import annotations

import smtplib
from types import SimpleNamespace

import pytest

from clima.core import email_client
from clima.core.config import Settings
from clima.core.email_client import (
    OutgoingEmail,
    SendGridMailer,
    SmtpMailer,
    UnconfiguredMailer,
    build_mailer,
)
from clima.core.errors import MailDeliveryError

MESSAGE = OutgoingEmail(
    to_email="alice@x.com",
    subject="Password reset",
    text_body="open https://front.example.com/changepassword?token=t",
    html_body="<p>open</p>",
)


def _settings(**overrides) -> Settings:
    values = {
        "JWT_SECRET": "s",
        "SENDGRID_API_KEY": None,
        "SMTP_HOST": None,
        **overrides,
    }
    return Settings(_env_file=None, **values)


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.sent = []
        self.logged_in = None
        self.tls = False
        self.closed = False
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, msg):
        self.sent.append(msg)

    def quit(self):
        self.closed = True

    def close(self):
        self.closed = True


class RefusingSMTP(FakeSMTP):
    def send_message(self, msg):
        raise smtplib.SMTPRecipientsRefused({msg["To"]: (550, b"no such user")})


class TimingOutSMTP(FakeSMTP):
    def send_message(self, msg):
        raise TimeoutError("timed out")


class NoTlsSMTP(FakeSMTP):
    def starttls(self):
        raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")


@pytest.fixture(autouse=True)
def _reset_fake_smtp():
    FakeSMTP.instances = []


def test_build_mailer_prefers_sendgrid():
    mailer = build_mailer(
        _settings(SENDGRID_API_KEY="SG.key", MAIL_FROM_EMAIL="no-reply@clima.example", SMTP_HOST="smtp")
    )

    assert isinstance(mailer, SendGridMailer)


def test_build_mailer_sendgrid_requires_sender():
    with pytest.raises(RuntimeError):
        build_mailer(_settings(SENDGRID_API_KEY="SG.key", MAIL_FROM_EMAIL=None))


def test_build_mailer_falls_back_to_smtp():
    mailer = build_mailer(_settings(SMTP_HOST="smtp.example.com", SMTP_USERNAME="u"))

    assert isinstance(mailer, SmtpMailer)
    assert mailer.from_email == "u"


def test_build_mailer_without_transport_fails_on_send():
    mailer = build_mailer(_settings())

    assert isinstance(mailer, UnconfiguredMailer)
    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)


def test_smtp_mailer_sends_over_starttls(monkeypatch):
    monkeypatch.setattr(email_client.smtplib, "SMTP", FakeSMTP)
    mailer = SmtpMailer("smtp.example.com", 587, "user", "pass", from_name="Clima")

    mailer.send(MESSAGE)

    server = FakeSMTP.instances[0]
    assert server.tls is True
    assert server.logged_in == ("user", "pass")
    assert server.closed is True
    sent = server.sent[0]
    assert sent["To"] == "alice@x.com"
    assert sent["From"] == "Clima <user>"


def test_smtp_mailer_wraps_delivery_errors(monkeypatch):
    monkeypatch.setattr(email_client.smtplib, "SMTP", RefusingSMTP)
    mailer = SmtpMailer("smtp.example.com", 587, "user", "pass")

    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)
    assert FakeSMTP.instances[0].closed is True


def test_sendgrid_mailer_checks_status(monkeypatch):
    mailer = SendGridMailer("SG.key", "no-reply@clima.example", "Clima")
    calls = []

    def fake_send(mail):
        calls.append(mail)
        return SimpleNamespace(status_code=202)

    monkeypatch.setattr(mailer.client, "send", fake_send)
    mailer.send(MESSAGE)
    assert len(calls) == 1

    monkeypatch.setattr(mailer.client, "send", lambda mail: SimpleNamespace(status_code=401))
    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)


def test_sendgrid_mailer_wraps_client_errors(monkeypatch):
    mailer = SendGridMailer("SG.key", "no-reply@clima.example")

    def boom(mail):
        raise OSError("connection reset")

    monkeypatch.setattr(mailer.client, "send", boom)
    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)


def test_smtp_mailer_wraps_socket_errors_during_send(monkeypatch):
    monkeypatch.setattr(email_client.smtplib, "SMTP", TimingOutSMTP)
    mailer = SmtpMailer("smtp.example.com", 587, "user", "pass")

    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)
    assert FakeSMTP.instances[0].closed is True


def test_smtp_mailer_closes_connection_when_starttls_fails(monkeypatch):
    monkeypatch.setattr(email_client.smtplib, "SMTP", NoTlsSMTP)
    mailer = SmtpMailer("smtp.example.com", 587, "user", "pass")

    with pytest.raises(MailDeliveryError):
        mailer.send(MESSAGE)
    server = FakeSMTP.instances[0]
    assert server.closed is True
    assert server.sent == []
