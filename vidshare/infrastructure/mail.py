# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Email delivery adapters."""

from __future__ import annotations

import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from vidshare.domain.accounts.exceptions import MailDeliveryError
from vidshare.domain.accounts.repositories import Mailer
from vidshare.shared.config import MailConfig
from vidshare.shared.logging import logger, mask_identifier


class SmtpMailer(Mailer):
    def __init__(self, config: MailConfig) -> None:
        if not config.smtp_host:
            raise ValueError("SMTP_HOST is required for MAIL_BACKEND=smtp")
        self._config = config

    def send(self, to: str, subject: str, body: str) -> None:
        cfg = self._config
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = cfg.from_address
        msg["To"] = to
        msg.attach(MIMEText(body, "html"))

        context = ssl.create_default_context()
        try:
            if cfg.smtp_use_tls:
                with smtplib.SMTP(cfg.smtp_host, cfg.smtp_port, timeout=cfg.timeout) as server:
                    server.starttls(context=context)
                    self._login(server)
                    server.sendmail(cfg.from_address, [to], msg.as_string())
            else:
                with smtplib.SMTP_SSL(
                    cfg.smtp_host, cfg.smtp_port, context=context, timeout=cfg.timeout
                ) as server:
                    self._login(server)
                    server.sendmail(cfg.from_address, [to], msg.as_string())
        except (smtplib.SMTPException, OSError) as exc:
            logger.error(
                f"mail.smtp: delivery failed to={mask_identifier(to)} host={cfg.smtp_host} "
                f"error={type(exc).__name__}"
            )
            raise MailDeliveryError() from exc

        logger.info(f"mail.smtp: sent to={mask_identifier(to)} subject={subject!r}")

    def _login(self, server: smtplib.SMTP) -> None:
        if self._config.smtp_user and self._config.smtp_password:
            server.login(self._config.smtp_user, self._config.smtp_password)


class ConsoleMailer(Mailer):
    """Development mailer: writes the message to the log instead of sending it."""

    def send(self, to: str, subject: str, body: str) -> None:
        logger.info(f"mail.console: to={mask_identifier(to)} subject={subject!r} body={body}")


def build_mailer(config: MailConfig) -> Mailer:
    if config.backend == "smtp":
        return SmtpMailer(config)
    return ConsoleMailer()


__all__ = ["ConsoleMailer", "SmtpMailer", "build_mailer"]
