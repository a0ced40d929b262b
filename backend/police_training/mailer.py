# Overview: Outgoing mail: Jinja2-rendered multipart messages sent over SMTP.

"""
Mailer.

Templates live in templates/ and define three blocks: subject,
plain_body and html_body. Delivery is attempted three times with a short
pause; the last failure is raised to the caller, which is always a
background task (see BackgroundTasks) that logs it.
"""

from __future__ import annotations

import smtplib
import time
from email.message import EmailMessage

from flask import current_app


SEND_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 0.5
SMTP_TIMEOUT_SECONDS = 5


class Mailer:
    def __init__(self, host: str, port: int, username: str, password: str, sender: str):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender

    @classmethod
    def from_config(cls, config) -> "Mailer":
        return cls(
            host=config["SMTP_HOST"],
            port=config["SMTP_PORT"],
            username=config["SMTP_USERNAME"],
            password=config["SMTP_PASSWORD"],
            sender=config["SMTP_SENDER"],
        )

    def render(self, template_name: str, data: dict) -> tuple[str, str, str]:
        template = current_app.jinja_env.get_template(template_name)
        context = template.new_context(data)

        def block(name: str) -> str:
            return "".join(template.blocks[name](context)).strip()

        return block("subject"), block("plain_body"), block("html_body")

    def build_message(self, recipient: str, template_name: str, data: dict) -> EmailMessage:
        subject, plain_body, html_body = self.render(template_name, data)
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(plain_body)
        msg.add_alternative(html_body, subtype="html")
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS) as smtp:
            if self.username:
                smtp.starttls()
                smtp.login(self.username, self.password)
            smtp.send_message(msg)

    def send(self, recipient: str, template_name: str, data: dict) -> None:
        msg = self.build_message(recipient, template_name, data)
        for attempt in range(1, SEND_ATTEMPTS + 1):
            try:
                self._deliver(msg)
                return
            except (smtplib.SMTPException, OSError):
                if attempt == SEND_ATTEMPTS:
                    raise
                time.sleep(RETRY_DELAY_SECONDS)


def _send(recipient: str, template_name: str, data: dict) -> None:
    if not current_app.config.get("MAIL_ENABLED"):
        current_app.logger.info("Mail disabled; not sending %s to %s", template_name, recipient)
        return
    Mailer.from_config(current_app.config).send(recipient, template_name, data)


def send_welcome(recipient: str, user_id: int, activation_token: str) -> None:
    _send(recipient, "user_welcome.tmpl", {"userID": user_id, "activationToken": activation_token})


def send_password_reset(recipient: str, reset_token: str) -> None:
    _send(recipient, "password_reset.tmpl", {"passwordResetToken": reset_token})
