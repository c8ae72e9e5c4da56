"""Async HTTP adapter for the remote customer store.

Usage:
    async with CustomerStoreClient.from_settings(get_settings()) as client:
        records = await client.list_records()
        confirmed = await client.create_record(CustomerDraft(first_name="Jane", ...))
"""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from customer_intake.config import Settings
from customer_intake.errors import TransportError
from customer_intake.models import CustomerDraft, CustomerRecord, ErrorResponse

logger = logging.getLogger(__name__)


class CustomerStore(Protocol):
    async def create_record(self, draft: CustomerDraft) -> CustomerRecord: ...

    async def list_records(self) -> list[CustomerRecord]: ...


def _unwrap(payload: Any) -> Any:
    """Strip the ``{"status", "message", "data"}`` envelope if the store used one."""
    if isinstance(payload, dict) and "data" in payload:
        return payload["data"]
    return payload


def _error_message(response: httpx.Response) -> tuple[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}", None
    try:
        error = ErrorResponse.model_validate(body)
    except ValidationError:
        return f"HTTP {response.status_code}", body
    return error.message, error.details


class CustomerStoreClient:
    """Async client for the customer store and the CRM push endpoint.

    Attributes:
        base_url: Base URL of the customer store API
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        create_path: str = "/api/v1/customers/new",
        list_path: str = "/api/v1/customers/all",
        crm_push_url: str = "http://localhost:8000/api/customers/push-to-crm",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the client.

        Args:
            base_url: Base URL of the customer store API
            create_path: Path of the create-customer endpoint
            list_path: Path of the list-customers endpoint
            crm_push_url: Absolute URL of the push-to-CRM endpoint
            timeout: Request timeout in seconds
            transport: Optional httpx transport, used by tests
        """
        self.base_url = base_url.rstrip("/")
        self.create_path = create_path
        self.list_path = list_path
        self.crm_push_url = crm_push_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "CustomerStoreClient":
        return cls(
            base_url=settings.api_base_url,
            create_path=settings.create_path,
            list_path=settings.list_path,
            crm_push_url=settings.crm_push_url,
            timeout=settings.request_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "CustomerStoreClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, url: str, *, json: dict | None = None) -> Any:
        """Make a request and return the decoded JSON body."""
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.HTTPError as exc:
            logger.warning(
                "Customer store unreachable",
                extra={"method": method, "url": url, "error": str(exc)},
            )
            raise TransportError(f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            message, details = _error_message(response)
            logger.warning(
                "Customer store rejected request",
                extra={"method": method, "url": url, "status_code": response.status_code},
            )
            raise TransportError(message, status_code=response.status_code, details=details)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(
                "Customer store returned a non-JSON body", status_code=response.status_code
            ) from exc

    async def create_record(self, draft: CustomerDraft) -> CustomerRecord:
        """Create a customer and return the record confirmed by the store."""
        data = await self._request("POST", self.create_path, json=draft.to_payload())
        try:
            return CustomerRecord.model_validate(_unwrap(data))
        except ValidationError as exc:
            raise TransportError("Customer store returned an invalid record", details=exc.errors()) from exc

    async def list_records(self) -> list[CustomerRecord]:
        """Return every customer held by the store."""
        data = _unwrap(await self._request("GET", self.list_path))
        if data is None:
            return []
        if not isinstance(data, list):
            raise TransportError("Customer store returned an invalid record list", details=data)
        try:
            return [CustomerRecord.model_validate(item) for item in data]
        except ValidationError as exc:
            raise TransportError("Customer store returned an invalid record", details=exc.errors()) from exc

    async def push_to_crm(self, record: CustomerRecord) -> Any:
        """Forward a confirmed customer to the CRM push endpoint."""
        return await self._request("POST", self.crm_push_url, json=record.to_payload())
