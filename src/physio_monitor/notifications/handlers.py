"""Notification handlers: webhook, email, and log-based alert delivery.

Architecture
~~~~~~~~~~~~
* **build_alert_notification()**: turns a session result carrying an
  ``alert`` event into an :class:`AlertNotification`.
* **NotificationHandler**: abstract base for delivery channels.
* **LogHandler / WebhookHandler / EmailHandler**: concrete channels.
* **NotificationDispatcher**: fan-out with error-isolation and results.
* **create_dispatcher()**: factory that wires handlers from settings.

Delivery is best-effort and single-shot; retry and backoff belong to the
transport behind each channel.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from email.message import EmailMessage
from typing import TYPE_CHECKING

import aiosmtplib
import httpx
import structlog

from physio_monitor.models import AlertNotification, EventType, SessionResult

if TYPE_CHECKING:
    from physio_monitor.config import Settings

logger = structlog.get_logger(__name__)


def build_alert_notification(
    result: SessionResult,
    *,
    recipient: str = "",
    subject_id: str = "",
    disclaimer: str = "",
) -> AlertNotification | None:
    """Return a notification when *result* fired an ``alert`` event, else ``None``."""
    if not result.has_event(EventType.ALERT):
        return None
    c = result.classified
    return AlertNotification(
        subject_id=subject_id,
        recipient=recipient,
        timestamp=c.timestamp,
        state=c.state,
        heart_rate=c.heart_rate,
        skin_temp=c.skin_temp,
        sweat_level=c.sweat_level,
        events=[e.message for e in result.events],
        disclaimer=disclaimer,
    )


# ── Dispatch result ───────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class DispatchResult:
    """Outcome summary for a single ``dispatch()`` call."""

    notification_id: str | None
    sent: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def all_ok(self) -> bool:
        return len(self.failed) == 0


# ── Abstract handler ──────────────────────────────────────────


class NotificationHandler(ABC):
    """Contract for alert delivery channels."""

    name: str = "base"

    @abstractmethod
    async def send(self, notification: AlertNotification) -> bool:
        """Deliver a notification.  Return ``True`` on success."""

    def should_handle(self, notification: AlertNotification) -> bool:  # noqa: ARG002
        """Return ``False`` to skip this notification (default: handle all)."""
        return True


# ── Concrete handlers ────────────────────────────────────────


class LogHandler(NotificationHandler):
    """Write notifications to the structured log (always enabled)."""

    name = "log"

    async def send(self, notification: AlertNotification) -> bool:
        logger.info(
            "notification.log",
            subject=notification.subject_id,
            state=notification.state.value,
            heart_rate=notification.heart_rate,
            skin_temp=notification.skin_temp,
            sweat_level=notification.sweat_level,
            events=notification.events,
        )
        return True


class WebhookHandler(NotificationHandler):
    """POST notification JSON to an external webhook URL."""

    name = "webhook"

    def __init__(
        self,
        url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url
        self._timeout = timeout
        self._transport = transport

    async def send(self, notification: AlertNotification) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    self._url, json=notification.model_dump(mode="json"),
                )
                resp.raise_for_status()
            logger.info("notification.webhook_sent", url=self._url, notification_id=notification.id)
            return True
        except httpx.HTTPError as exc:
            logger.error("notification.webhook_failed", url=self._url, error=str(exc))
            return False


class EmailHandler(NotificationHandler):
    """Send alert emails over SMTP with *aiosmtplib*.

    Credentials are optional; an empty username skips ``AUTH``.  STARTTLS
    is negotiated when the server offers it unless *start_tls* forces a
    choice.
    """

    name = "email"

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        username: str,
        password: str,
        from_addr: str,
        to_addr: str,
        *,
        start_tls: bool | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._host = smtp_host
        self._port = smtp_port
        self._user = username
        self._password = password
        self._from = from_addr
        self._to = to_addr
        self._start_tls = start_tls
        self._timeout = timeout

    def should_handle(self, notification: AlertNotification) -> bool:
        return bool(notification.recipient or self._to)

    def build_message(self, notification: AlertNotification) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._from
        message["To"] = notification.recipient or self._to
        message["Subject"] = f"[{notification.state.value}] Health state alert"

        lines = [
            f"Subject: {notification.subject_id or 'unknown'}",
            f"Time: {notification.timestamp.isoformat()}",
            f"Heart rate: {notification.heart_rate} BPM",
            f"Skin temperature: {notification.skin_temp} C",
            f"Sweat level: {notification.sweat_level}",
            "",
            *notification.events,
        ]
        if notification.disclaimer:
            lines += ["", notification.disclaimer]
        message.set_content("\n".join(lines))
        return message

    async def send(self, notification: AlertNotification) -> bool:
        message = self.build_message(notification)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._host,
                port=self._port,
                username=self._user or None,
                password=self._password or None,
                start_tls=self._start_tls,
                timeout=self._timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("notification.email_failed", host=self._host, to=message["To"], error=str(exc))
            return False
        logger.info("notification.email_sent", to=message["To"], notification_id=notification.id)
        return True


# ── Dispatcher ────────────────────────────────────────────────


class NotificationDispatcher:
    """Fan-out notifications to registered handlers with error isolation.

    Each handler is invoked independently; a failure in one channel
    never blocks delivery to the others.
    """

    def __init__(self, *, handlers: list[NotificationHandler] | None = None) -> None:
        self._handlers: list[NotificationHandler] = handlers or [LogHandler()]

    # ── Handler management ────────────────────────────────────

    def add_handler(self, handler: NotificationHandler) -> None:
        self._handlers.append(handler)

    def remove_handler(self, name: str) -> bool:
        """Remove the first handler matching *name*. Return ``True`` if found."""
        for i, h in enumerate(self._handlers):
            if h.name == name:
                self._handlers.pop(i)
                return True
        return False

    @property
    def handler_names(self) -> list[str]:
        return [h.name for h in self._handlers]

    # ── Dispatch ──────────────────────────────────────────────

    async def dispatch(self, notification: AlertNotification) -> DispatchResult:
        """Send *notification* to every handler, collecting per-handler outcomes.

        A handler that raises is caught, logged, and marked as failed so
        remaining handlers still execute.
        """
        sent: list[str] = []
        failed: list[str] = []

        for handler in self._handlers:
            if not handler.should_handle(notification):
                continue
            try:
                ok = await handler.send(notification)
                (sent if ok else failed).append(handler.name)
            except Exception:
                logger.exception(
                    "notification.handler_error",
                    handler=handler.name,
                    notification_id=notification.id,
                )
                failed.append(handler.name)

        result = DispatchResult(notification_id=notification.id, sent=sent, failed=failed)
        if result.failed:
            logger.warning(
                "notification.partial_failure",
                notification_id=notification.id,
                failed=result.failed,
            )
        return result

    async def notify_result(
        self,
        result: SessionResult,
        *,
        recipient: str = "",
        subject_id: str = "",
        disclaimer: str = "",
    ) -> DispatchResult | None:
        """Dispatch an alert for *result* if it fired one; ``None`` otherwise."""
        notification = build_alert_notification(
            result, recipient=recipient, subject_id=subject_id, disclaimer=disclaimer,
        )
        if notification is None:
            return None
        return await self.dispatch(notification)


# ── Factory ───────────────────────────────────────────────────


def create_dispatcher(settings: Settings) -> NotificationDispatcher:
    """Build a :class:`NotificationDispatcher` wired from application settings.

    * **LogHandler** is always registered.
    * **WebhookHandler** is added when ``settings.webhook_url`` is non-empty.
    * **EmailHandler** is added when ``settings.smtp_host`` is non-empty.
    """
    dispatcher = NotificationDispatcher()

    if settings.webhook_url:
        dispatcher.add_handler(WebhookHandler(settings.webhook_url))

    if settings.smtp_host:
        dispatcher.add_handler(
            EmailHandler(
                smtp_host=settings.smtp_host,
                smtp_port=settings.smtp_port,
                username=settings.smtp_user,
                password=settings.smtp_password,
                from_addr=settings.notification_email_from,
                to_addr=settings.notification_email_to or settings.notification_email_from,
            ),
        )

    return dispatcher
