"""
Alert delivery for scam calls and known scammer numbers.
"""

import logging
from typing import Any, Dict, Optional, Protocol

import httpx

from config.settings import settings
from mindshield.core.logging import mask_phone_number
from mindshield.core.metrics import MetricsCollector

logger = logging.getLogger(__name__)

SCAM_ALERT_TITLE = "⚠️ Scam Alert!"
KNOWN_SCAMMER_TITLE = "\U0001f6a8 Known Scammer: {phone_number}"


class NotificationError(Exception):
    """Raised when an alert could not be delivered."""


class AlertNotifier(Protocol):
    """Capability interface for user-facing alerts."""

    async def send_scam_alert(self, call_id: str, summary: str, risk_score: int) -> None:
        ...

    async def send_known_scammer_alert(
        self, phone_number: str, times_flagged: int, highest_risk_score: int
    ) -> None:
        ...


def known_scammer_message(times_flagged: int, highest_risk_score: int) -> str:
    if times_flagged == 1:
        return f"This number was previously flagged as a scam (risk score: {highest_risk_score})."
    return (
        f"This number has been flagged {times_flagged} times as a scam "
        f"(highest risk: {highest_risk_score})."
    )


def build_scam_alert(call_id: str, summary: str, risk_score: int) -> Dict[str, Any]:
    return {
        "type": "scam_alert",
        "title": SCAM_ALERT_TITLE,
        "body": summary,
        "data": {"call_id": call_id, "risk_score": risk_score},
    }


def build_known_scammer_alert(
    phone_number: str, times_flagged: int, highest_risk_score: int
) -> Dict[str, Any]:
    return {
        "type": "known_scammer",
        "title": KNOWN_SCAMMER_TITLE.format(phone_number=phone_number),
        "body": known_scammer_message(times_flagged, highest_risk_score),
        "data": {"phone_number": phone_number, "times_flagged": times_flagged},
    }


class LoggingAlertNotifier:
    """Writes alerts to the application log."""

    async def send_scam_alert(self, call_id: str, summary: str, risk_score: int) -> None:
        alert = build_scam_alert(call_id, summary, risk_score)
        logger.warning(alert["body"], extra={"alert": alert})
        MetricsCollector.record_alert("scam_alert", "logged")

    async def send_known_scammer_alert(
        self, phone_number: str, times_flagged: int, highest_risk_score: int
    ) -> None:
        # Alerts only reach the log here.
        alert = build_known_scammer_alert(mask_phone_number(phone_number), times_flagged, highest_risk_score)
        logger.warning(alert["body"], extra={"alert": alert})
        MetricsCollector.record_alert("known_scammer", "logged")


class WebhookAlertNotifier:
    """
    Posts alerts as JSON to a push gateway webhook.
    """

    def __init__(
        self,
        webhook_url: str,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout if timeout is not None else settings.alerts.timeout_seconds
        self._transport = transport

    async def _post(self, alert: Dict[str, Any]) -> None:
        alert_type = alert["type"]
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
                resp = await client.post(self.webhook_url, json=alert)
        except httpx.HTTPError as e:
            MetricsCollector.record_alert(alert_type, "error")
            raise NotificationError(f"Alert webhook connection error: {e}") from e

        if resp.is_error:
            MetricsCollector.record_alert(alert_type, "error")
            raise NotificationError(
                f"Alert webhook rejected {alert_type} (HTTP {resp.status_code})"
            )

        MetricsCollector.record_alert(alert_type, "sent")
        logger.info(f"Delivered {alert_type} alert")

    async def send_scam_alert(self, call_id: str, summary: str, risk_score: int) -> None:
        await self._post(build_scam_alert(call_id, summary, risk_score))

    async def send_known_scammer_alert(
        self, phone_number: str, times_flagged: int, highest_risk_score: int
    ) -> None:
        await self._post(build_known_scammer_alert(phone_number, times_flagged, highest_risk_score))


def create_notifier() -> AlertNotifier:
    """Webhook notifier when a webhook URL is configured, log-only otherwise."""
    if settings.alerts.webhook_url:
        return WebhookAlertNotifier(settings.alerts.webhook_url)
    return LoggingAlertNotifier()
