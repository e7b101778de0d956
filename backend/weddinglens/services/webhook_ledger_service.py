"""Service for logging inbound webhooks and tracking their processing outcome."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from weddinglens.core.exceptions import RepositoryException
from weddinglens.models.webhook_event import WebhookEvent
from weddinglens.repositories.factory import RepositoryFactory
from weddinglens.services.base import BaseService

_SENSITIVE_HEADERS = {
    "authorization",
    "stripe-signature",
}

# Outcomes after which a redelivery must not be applied again
FINAL_STATUSES = frozenset({"processed", "ignored"})


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


class WebhookLedgerService(BaseService):
    """Business logic for webhook ledger entries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.repository = RepositoryFactory.create_webhook_event_repository(db)

    @BaseService.measure_operation("webhook_ledger.log_received")
    def log_received(
        self,
        *,
        source: str,
        event_id: str,
        event_type: str,
        payload: dict[str, Any],
        headers: dict[str, Any] | None = None,
    ) -> WebhookEvent:
        """
        Log a received webhook before processing.

        A redelivered event id returns the existing row with its retry count bumped.
        """
        safe_headers = self._sanitize_headers(headers) if headers else None
        existing = self.repository.find_by_source_and_event_id(source, event_id)
        if existing:
            return self._record_retry(existing, safe_headers)

        try:
            return self.repository.create(
                source=source,
                event_type=event_type or "unknown",
                event_id=event_id,
                payload=payload,
                headers=safe_headers,
                status="received",
                received_at=_now_utc(),
                retry_count=0,
            )
        except RepositoryException as exc:
            # Another worker logged the same delivery first.
            if isinstance(exc.__cause__, IntegrityError):
                existing = self.repository.find_by_source_and_event_id(source, event_id)
                if existing is not None:
                    return self._record_retry(existing, safe_headers)
            raise

    def _record_retry(
        self, event: WebhookEvent, safe_headers: dict[str, Any] | None
    ) -> WebhookEvent:
        event.retry_count = (event.retry_count or 0) + 1
        event.last_retry_at = _now_utc()
        if safe_headers is not None:
            event.headers = safe_headers
        self.repository.flush()
        return event

    @staticmethod
    def is_final(event: WebhookEvent) -> bool:
        return event.status in FINAL_STATUSES

    @BaseService.measure_operation("webhook_ledger.mark_processed")
    def mark_processed(
        self,
        event: WebhookEvent,
        *,
        status: str = "processed",
        related_booking_id: int | None = None,
        duration_ms: int | None = None,
        note: str | None = None,
    ) -> WebhookEvent:
        """Mark webhook as handled (``processed``, or ``ignored`` when nothing applied)."""
        event.status = status
        event.processed_at = _now_utc()
        event.related_booking_id = related_booking_id
        event.processing_duration_ms = duration_ms
        event.processing_error = note
        self.repository.flush()
        return event

    @BaseService.measure_operation("webhook_ledger.mark_failed")
    def mark_failed(
        self,
        event: WebhookEvent,
        *,
        error: str,
        duration_ms: int | None = None,
    ) -> WebhookEvent:
        """Mark webhook as failed; the gateway will redeliver it."""
        event.status = "failed"
        event.processing_error = error[:2000]
        event.processed_at = _now_utc()
        event.processing_duration_ms = duration_ms
        self.repository.flush()
        return event

    def list_events(
        self,
        *,
        status: str | None = None,
        event_type: str | None = None,
        since_hours: int = 24,
        limit: int = 50,
    ) -> list[WebhookEvent]:
        return self.repository.list_events(
            status=status, event_type=event_type, since_hours=since_hours, limit=limit
        )

    @staticmethod
    def _sanitize_headers(headers: dict[str, Any]) -> dict[str, Any]:
        sanitized: dict[str, Any] = {}
        for key, value in headers.items():
            if key.lower() in _SENSITIVE_HEADERS:
                sanitized[key] = "***"
            else:
                sanitized[key] = value
        return sanitized
