import logging
from typing import Protocol

from customer_intake.client import CustomerStoreClient
from customer_intake.config import Settings
from customer_intake.errors import IntegrationError, TransportError
from customer_intake.google_sheets import GoogleSheetIntegration
from customer_intake.logging_config import operation_scope
from customer_intake.models import CustomerRecord, Notification, NotificationKind, NotificationSink

logger = logging.getLogger(__name__)


class Integration(Protocol):
    name: str

    async def push(self, record: CustomerRecord) -> None: ...


class CrmIntegration:
    """Forward customers to the CRM push endpoint."""

    name = "crm"

    def __init__(self, client: CustomerStoreClient):
        self._client = client

    async def push(self, record: CustomerRecord) -> None:
        try:
            await self._client.push_to_crm(record)
        except TransportError as exc:
            raise IntegrationError(exc.message, status_code=exc.status_code, details=exc.details) from exc
        logger.info("Forwarded customer to CRM", extra={"customer_id": record.id})


class PushToIntegration:
    """One-off forwarding of a confirmed customer to an external integration.

    Holds no record state: each call reports its own outcome and a failure
    never retries or touches the local record list.
    """

    def __init__(self, integration: Integration, notify: NotificationSink | None = None):
        self._integration = integration
        self._notify = notify

    async def __call__(self, record: CustomerRecord) -> Notification:
        if not isinstance(record, CustomerRecord):
            raise TypeError("only confirmed CustomerRecord instances can be pushed")

        with operation_scope("push"):
            try:
                await self._integration.push(record)
            except IntegrationError as exc:
                logger.warning(
                    "Failed to push to CRM",
                    extra={
                        "integration": self._integration.name,
                        "customer_id": record.id,
                        "error": exc.message,
                    },
                )
                notification = Notification(
                    kind=NotificationKind.FAILURE,
                    message="Failed to push to CRM",
                    source="integration",
                    detail=exc.message,
                )
            else:
                logger.info(
                    "CRM integration successful",
                    extra={"integration": self._integration.name, "customer_id": record.id},
                )
                notification = Notification(
                    kind=NotificationKind.SUCCESS,
                    message="CRM integration successful",
                    source="integration",
                )

        if self._notify is not None:
            self._notify(notification)
        return notification


def build_integration(settings: Settings, client: CustomerStoreClient) -> Integration:
    """Return the push target selected by configuration."""

    if settings.integration == "google_sheets":
        return GoogleSheetIntegration(settings)
    return CrmIntegration(client)
