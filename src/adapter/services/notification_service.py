"""Issuance Notifier Implementations

Provides concrete implementations for announcing issued invoices.
"""

import logging
from typing import Any, Dict, List, Optional
import httpx
from src.app.services.notification_service import IssuanceNotifier
from src.domain.issued_invoice import IssuedInvoice

logger = logging.getLogger(__name__)


def issued_invoice_payload(issued_invoice: IssuedInvoice) -> Dict[str, Any]:
    return {
        "type": "invoice_issued",
        "ledger_id": issued_invoice.id,
        "invoice_id": issued_invoice.source_invoice_id,
        "internal_number": issued_invoice.internal_number,
        "external_number": issued_invoice.external_number,
        "external_url": issued_invoice.external_url,
        "engagement_id": issued_invoice.engagement_id,
        "engagement_name": issued_invoice.engagement_name,
        "client_id": issued_invoice.client_id,
        "client_name": issued_invoice.client_name,
        "period": f"{issued_invoice.year}-{issued_invoice.month:02d}",
        "total_amount": str(issued_invoice.total_amount),
        "currency": issued_invoice.currency,
        "issued_at": issued_invoice.issued_at.isoformat(),
        "issued_by": issued_invoice.issued_by,
    }


class LoggingIssuanceNotifier(IssuanceNotifier):
    """Writes issued invoices to the application log"""

    async def send_invoice_issued(self, issued_invoice: IssuedInvoice) -> bool:
        logger.info(
            f"[INVOICE ISSUED] {issued_invoice.internal_number} "
            f"(provider {issued_invoice.external_number}), "
            f"Client: {issued_invoice.client_name}, "
            f"Engagement: {issued_invoice.engagement_name}, "
            f"Amount: {issued_invoice.total_amount} {issued_invoice.currency}"
        )
        return True


class WebhookIssuanceNotifier(IssuanceNotifier):
    """
    Posts issued invoices to an HTTP webhook

    Sends JSON payload to configured webhook URL.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Args:
            webhook_url: URL to POST notifications to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def send_invoice_issued(self, issued_invoice: IssuedInvoice) -> bool:
        """
        Send issued invoice via webhook

        Returns:
            True if webhook call succeeded, False otherwise
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json=issued_invoice_payload(issued_invoice),
                )
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                f"Webhook notification for invoice {issued_invoice.internal_number} failed: {e}"
            )
            return False

        logger.info(
            f"Webhook notification sent for invoice {issued_invoice.internal_number} "
            f"to {self.webhook_url}"
        )
        return True


class CompositeIssuanceNotifier(IssuanceNotifier):
    """Fans out to several notifiers; succeeds when any of them does"""

    def __init__(self, notifiers: List[IssuanceNotifier]):
        self.notifiers = notifiers

    async def send_invoice_issued(self, issued_invoice: IssuedInvoice) -> bool:
        success = False
        for notifier in self.notifiers:
            try:
                if await notifier.send_invoice_issued(issued_invoice):
                    success = True
            except Exception as e:
                logger.error(f"Notifier {type(notifier).__name__} failed: {e}")
        return success


def create_issuance_notifier(webhook_url: Optional[str] = None) -> IssuanceNotifier:
    """
    Build the notifier for the configured channels

    Args:
        webhook_url: Optional webhook URL. When set, notifications go to the
                     log and the webhook, otherwise to the log only.
    """
    if not webhook_url:
        return LoggingIssuanceNotifier()
    return CompositeIssuanceNotifier(
        [LoggingIssuanceNotifier(), WebhookIssuanceNotifier(webhook_url)]
    )
