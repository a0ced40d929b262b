"""
Background task and mailer tests.

No SMTP server is contacted: delivery is replaced with stand-ins.
"""

import smtplib
import threading

import pytest

from police_training import create_app, mailer
from police_training.extensions import background
from police_training.mailer import Mailer


class TestBackgroundTasks:

    def test_task_runs_in_app_context(self, app):
        from flask import current_app

        seen = {}

        def task(value):
            seen["value"] = value
            seen["app"] = current_app.name

        background.run(task, 42)
        background.wait(timeout=5)
        assert seen == {"value": 42, "app": app.name}
        assert background.outstanding == 0

    def test_failure_is_contained_and_logged(self, app, caplog):
        def boom():
            raise RuntimeError("smtp down")

        future = background.run(boom, name="boom")
        background.wait(timeout=5)

        assert future.exception() is None
        assert "Background task boom failed" in caplog.text

    def test_wait_blocks_until_done(self, app):
        release = threading.Event()
        done = []

        def slow():
            release.wait(timeout=5)
            done.append(True)

        background.run(slow)
        assert background.outstanding == 1
        release.set()
        background.wait(timeout=5)
        assert done == [True]

    def test_init_app_twice_keeps_one_pool(self, app):
        tasks = app.extensions["background"]
        background.init_app(app)
        assert app.extensions["background"] is tasks

    def test_each_app_runs_tasks_in_its_own_context(self, app):
        from flask import current_app

        other = create_app({
            "TESTING": True,
            "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
            "MAIL_ENABLED": False,
        })
        assert other.extensions["background"] is not app.extensions["background"]

        seen = []
        with other.app_context():
            background.run(lambda: seen.append(current_app._get_current_object()))
            background.wait(timeout=5)
        background.shutdown(other)

        assert seen == [other]
        assert app.extensions["background"].executor is not None


class TestMailer:

    @pytest.fixture
    def smtp_mailer(self):
        return Mailer("smtp.test", 2525, "", "", "Training <noreply@example.com>")

    def test_welcome_template_blocks(self, app, smtp_mailer):
        with app.test_request_context():
            subject, plain, html = smtp_mailer.render(
                "user_welcome.tmpl", {"userID": 7, "activationToken": "A" * 22}
            )
        assert subject == "Welcome to the Police Training Records System!"
        assert "A" * 22 in plain
        assert "user ID number is 7" in plain
        assert html.startswith("<!doctype html>")

    def test_message_is_multipart(self, app, smtp_mailer):
        with app.app_context():
            msg = smtp_mailer.build_message("to@example.com", "password_reset.tmpl", {"passwordResetToken": "B" * 22})
        assert msg["To"] == "to@example.com"
        assert msg.is_multipart()
        assert [part.get_content_type() for part in msg.iter_parts()] == ["text/plain", "text/html"]

    def test_send_retries_then_succeeds(self, app, smtp_mailer, monkeypatch):
        attempts = []

        def flaky(msg):
            attempts.append(msg)
            if len(attempts) < 3:
                raise smtplib.SMTPServerDisconnected("try again")

        monkeypatch.setattr(smtp_mailer, "_deliver", flaky)
        monkeypatch.setattr(mailer, "RETRY_DELAY_SECONDS", 0)

        with app.app_context():
            smtp_mailer.send("to@example.com", "password_reset.tmpl", {"passwordResetToken": "C" * 22})
        assert len(attempts) == 3

    def test_send_gives_up_after_three_attempts(self, app, smtp_mailer, monkeypatch):
        attempts = []

        def down(msg):
            attempts.append(msg)
            raise ConnectionRefusedError()

        monkeypatch.setattr(smtp_mailer, "_deliver", down)
        monkeypatch.setattr(mailer, "RETRY_DELAY_SECONDS", 0)

        with app.app_context():
            with pytest.raises(ConnectionRefusedError):
                smtp_mailer.send("to@example.com", "password_reset.tmpl", {"passwordResetToken": "C" * 22})
        assert len(attempts) == 3

    def test_disabled_mail_never_connects(self, app, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("SMTP should not be contacted")

        monkeypatch.setattr(smtplib, "SMTP", fail)
        with app.app_context():
            mailer.send_welcome("to@example.com", 1, "D" * 22)
