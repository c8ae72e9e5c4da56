"""
Wire the customer intake workflow for a presentation layer.

Example:
    async with CustomerIntakeApp.from_settings(notify=show_toast) as intake:
        await intake.start()
        intake.coordinator.update_field("first_name", "Jane")
        outcome = await intake.coordinator.submit()
        render(intake.view())
"""

import logging

import httpx

from customer_intake.client import CustomerStoreClient
from customer_intake.config import Settings, get_settings
from customer_intake.logging_config import configure_logging
from customer_intake.models import CustomerRecord, FormView, Notification, NotificationSink
from customer_intake.records import RecordListSynchronizer
from customer_intake.rules import DEFAULT_COUNTRY
from customer_intake.services import Integration, PushToIntegration, build_integration
from customer_intake.submission import SubmissionCoordinator

logger = logging.getLogger(__name__)


class CustomerIntakeApp:
    """Owns the client and the three core components for one form session."""

    def __init__(
        self,
        client: CustomerStoreClient,
        integration: Integration,
        notify: NotificationSink | None = None,
        default_country: str = DEFAULT_COUNTRY,
    ):
        self.client = client
        self.records = RecordListSynchronizer(client, notify=notify)
        self.coordinator = SubmissionCoordinator(
            client, self.records, notify=notify, default_country=default_country
        )
        self.push_to_integration = PushToIntegration(integration, notify=notify)

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        notify: NotificationSink | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "CustomerIntakeApp":
        settings = settings or get_settings()
        configure_logging(settings.log_level)
        client = CustomerStoreClient.from_settings(settings, transport=transport)
        integration = build_integration(settings, client)
        logger.info(
            "Customer intake configured",
            extra={
                "environment": settings.environment,
                "api_base_url": settings.api_base_url,
                "integration": integration.name,
                "default_country": settings.default_country,
            },
        )
        return cls(client, integration, notify=notify, default_country=settings.default_country)

    async def __aenter__(self) -> "CustomerIntakeApp":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        await self.client.close()

    async def start(self) -> bool:
        """Load the remote customer list; safe to call more than once."""
        return await self.records.initialize()

    async def push(self, record: CustomerRecord) -> Notification:
        return await self.push_to_integration(record)

    def view(self) -> FormView:
        validation = self.coordinator.validation
        return FormView(
            fields=self.coordinator.fields(),
            is_valid=self.coordinator.is_valid,
            errors=validation.messages if validation else {},
            records=self.records.records,
        )
