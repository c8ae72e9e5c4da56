"""Shared fixtures and in-memory doubles for the customer intake tests."""

import asyncio
from typing import Any

import pytest

from customer_intake.errors import IntegrationError, TransportError
from customer_intake.models import CustomerDraft, CustomerRecord, Notification


class FakeStore:
    """In-memory stand-in for the remote customer store."""

    def __init__(self, records: list[CustomerRecord] | None = None) -> None:
        self.stored: list[CustomerRecord] = list(records or [])
        self.create_calls: list[CustomerDraft] = []
        self.list_calls = 0
        self.fail_create = False
        self.fail_list = False
        self.list_gate: asyncio.Event | None = None
        self.create_gates: list[asyncio.Event] = []

    async def create_record(self, draft: CustomerDraft) -> CustomerRecord:
        self.create_calls.append(draft)
        if self.create_gates:
            await self.create_gates.pop(0).wait()
        if self.fail_create:
            raise TransportError("Failed to submit form", status_code=500)
        record = CustomerRecord.model_validate(
            {**draft.to_payload(), "_id": f"cust-{len(self.stored) + 1}"}
        )
        self.stored.append(record)
        return record

    async def list_records(self) -> list[CustomerRecord]:
        self.list_calls += 1
        if self.list_gate is not None:
            await self.list_gate.wait()
        if self.fail_list:
            raise TransportError("Failed to fetch customers", status_code=503)
        return list(self.stored)


class FakeIntegration:
    name = "fake"

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.pushed: list[CustomerRecord] = []

    async def push(self, record: CustomerRecord) -> None:
        self.pushed.append(record)
        if self.fail:
            raise IntegrationError("CRM unavailable", status_code=502)


def draft_data(**overrides: Any) -> dict[str, Any]:
    data: dict[str, Any] = {
        "phone_number": "9999999999",
        "first_name": "A",
        "last_name": "B",
        "email": "a@b.com",
        "address": {
            "street": "S",
            "city": "C",
            "state": "ST",
            "zip_code": "560001",
            "country": "IN",
        },
    }
    address = overrides.pop("address", None)
    if address:
        data["address"] = {**data["address"], **address}
    data.update(overrides)
    return data


def make_draft(**overrides: Any) -> CustomerDraft:
    return CustomerDraft.model_validate(draft_data(**overrides))


def make_record(record_id: str = "cust-0", **overrides: Any) -> CustomerRecord:
    return CustomerRecord.model_validate({**draft_data(**overrides), "id": record_id})


@pytest.fixture
def store() -> FakeStore:
    return FakeStore()


@pytest.fixture
def notifications() -> list[Notification]:
    return []


@pytest.fixture
def valid_draft() -> CustomerDraft:
    return make_draft()
