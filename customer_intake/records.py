import asyncio
import logging

from customer_intake.client import CustomerStore
from customer_intake.errors import TransportError
from customer_intake.logging_config import operation_scope
from customer_intake.models import CustomerRecord, Notification, NotificationKind, NotificationSink

logger = logging.getLogger(__name__)


class RecordListSynchronizer:
    """Owns the local list of confirmed customers.

    The list is replaced once by ``initialize()`` and afterwards only grows
    through ``append()``. Appends issued while the initial fetch is still in
    flight wait for it to settle so the fetch cannot overwrite them.
    """

    def __init__(self, store: CustomerStore, notify: NotificationSink | None = None):
        self._store = store
        self._notify = notify
        self._records: list[CustomerRecord] = []
        self._fetch_started = False
        self._fetch_settled = asyncio.Event()

    @property
    def records(self) -> tuple[CustomerRecord, ...]:
        return tuple(self._records)

    def __len__(self) -> int:
        return len(self._records)

    @property
    def initialized(self) -> bool:
        return self._fetch_settled.is_set()

    async def initialize(self) -> bool:
        """Fetch the store's records once and replace the local list.

        Returns:
            True if the fetch succeeded. Calls after the first are no-ops
            returning False.
        """
        if self._fetch_started:
            logger.debug("Record list already initialized; skipping fetch")
            return False
        self._fetch_started = True

        with operation_scope("list"):
            try:
                records = await self._store.list_records()
                self._records = list(records)
            except TransportError as exc:
                logger.error(
                    "Failed to fetch customers",
                    extra={"error": exc.message, "status_code": exc.status_code},
                )
                self._emit(NotificationKind.FAILURE, "Failed to fetch customers", exc.message)
                return False
            finally:
                self._fetch_settled.set()

            logger.info("Fetched customers", extra={"count": len(self._records)})
            return True

    async def append(self, record: CustomerRecord) -> None:
        """Add one confirmed record to the end of the list."""
        if not isinstance(record, CustomerRecord):
            raise TypeError("only confirmed CustomerRecord instances can be listed")
        if self._fetch_started and not self._fetch_settled.is_set():
            await self._fetch_settled.wait()
        self._records.append(record)
        logger.debug("Appended customer", extra={"customer_id": record.id})

    def _emit(self, kind: NotificationKind, message: str, detail: str | None = None) -> None:
        if self._notify is not None:
            self._notify(Notification(kind=kind, message=message, source="records", detail=detail))
