# src/workboard/notify/dispatcher.py

"""
Notification dispatch.

dispatch() never raises for configuration, recipient, rendering or transport problems:
each of them becomes a DeliveryOutcome with sent=False, so task mutations can
never fail because a notification did. One send attempt per call, no retry.
"""

from __future__ import annotations

import logging
import smtplib
import ssl
from collections.abc import Callable, Mapping
from email.message import EmailMessage
from email.utils import formatdate, make_msgid
from typing import Any

from ..core.ports import Directory, MailTransport, TransportConfigSource
from .models import DeliveryOutcome, NotificationKind, SmtpConfig
from .renderer import NotificationRenderer

logger = logging.getLogger(__name__)

RecipientResolver = Callable[[], str | None]


def assignee_resolver(directory: Directory, assignee: str | None) -> RecipientResolver:
    """Resolve a task's assignee name to a contact address via the directory."""

    def resolve() -> str | None:
        name = (assignee or "").strip()
        if not name:
            return None
        return directory.lookup(name)

    return resolve


def fixed_recipient(address: str | None) -> RecipientResolver:
    """Explicit address (reports, test and password mails)."""

    def resolve() -> str | None:
        return (address or "").strip() or None

    return resolve


class SmtpMailTransport:
    """
    MailTransport over smtplib.

    - secure=True: implicit TLS (SMTP_SSL, usually port 465)
    - secure=False: plain connection upgraded with STARTTLS when the server offers it
    Every network call is bounded by `timeout_seconds`.
    """

    def __init__(self, *, timeout_seconds: float = 15.0) -> None:
        self._timeout = max(1.0, float(timeout_seconds))

    def send(self, config: SmtpConfig, message: EmailMessage) -> None:
        context = ssl.create_default_context()
        if config.secure:
            with smtplib.SMTP_SSL(config.host, config.port, timeout=self._timeout, context=context) as smtp:
                smtp.login(config.user, config.password)
                smtp.send_message(message)
            return

        with smtplib.SMTP(config.host, config.port, timeout=self._timeout) as smtp:
            smtp.ehlo()
            if smtp.has_extn("starttls"):
                smtp.starttls(context=context)
                smtp.ehlo()
            smtp.login(config.user, config.password)
            smtp.send_message(message)


class NotificationDispatcher:
    def __init__(
        self,
        *,
        config_source: TransportConfigSource,
        transport: MailTransport,
        renderer: NotificationRenderer,
    ) -> None:
        self._config_source = config_source
        self._transport = transport
        self._renderer = renderer

    def dispatch(
        self,
        kind: NotificationKind | str,
        payload: Mapping[str, Any],
        recipient_resolver: RecipientResolver,
    ) -> DeliveryOutcome:
        """
        One delivery attempt. Raises only ValueError for an unknown kind;
        every later problem becomes sent=False.
        """
        try:
            kind = NotificationKind(kind)
        except ValueError as exc:
            raise ValueError(f"unknown notification kind: {kind!r}") from exc

        try:
            config: SmtpConfig = self._config_source.get_smtp_config()
        except Exception:
            logger.exception("Failed to load SMTP config; skipping %s notification", kind)
            return DeliveryOutcome(sent=False, target=None)

        if not config.is_configured:
            logger.info("SMTP not configured; skipping %s notification", kind)
            return DeliveryOutcome(sent=False, target=None)

        try:
            target = recipient_resolver()
        except Exception:
            logger.exception("Recipient lookup failed for %s notification", kind)
            target = None
        if not target:
            logger.info("No recipient for %s notification", kind)
            return DeliveryOutcome(sent=False, target=None)

        try:
            message = self._build_message(kind, payload, config, target)
        except Exception:
            logger.exception("Could not build %s mail to=%s", kind, target)
            return DeliveryOutcome(sent=False, target=target)

        try:
            self._transport.send(config, message)
        except Exception:
            logger.exception("Mail delivery failed kind=%s to=%s", kind, target)
            return DeliveryOutcome(sent=False, target=target)

        logger.info("Mail sent kind=%s to=%s", kind, target)
        return DeliveryOutcome(sent=True, target=target)

    def _build_message(
        self,
        kind: NotificationKind,
        payload: Mapping[str, Any],
        config: SmtpConfig,
        target: str,
    ) -> EmailMessage:
        # Header assignment rejects CR/LF, so bad config or addresses fail here.
        rendered = self._renderer.render(kind, payload)

        message = EmailMessage()
        message["Subject"] = rendered.subject
        message["From"] = config.sender
        message["To"] = target
        message["Date"] = formatdate(localtime=True)
        message["Message-ID"] = make_msgid()
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(rendered.html, subtype="html")
        return message
