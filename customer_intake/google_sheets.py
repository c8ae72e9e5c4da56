import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Dict

import gspread
import requests
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials

from customer_intake.config import Settings
from customer_intake.errors import IntegrationError
from customer_intake.models import CustomerRecord

logger = logging.getLogger(__name__)

_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


def _build_credentials(service_account_info: Dict[str, Any]) -> Credentials:
    return Credentials.from_service_account_info(service_account_info, scopes=_SCOPES)


def customer_row(record: CustomerRecord, timestamp: str) -> list[str]:
    address = record.address
    return [
        timestamp,
        record.id,
        record.first_name,
        record.last_name,
        record.phone_number,
        record.email,
        address.street,
        address.city,
        address.state,
        address.zip_code,
        address.country,
        record.organization or "",
    ]


class GoogleSheetIntegration:
    """Push target that appends each customer as a row in a Google Sheet."""

    name = "google_sheets"

    def __init__(self, settings: Settings):
        self._settings = settings

    def _open_worksheet(self) -> gspread.Worksheet:
        creds = _build_credentials(self._settings.google_service_account_info)
        client = gspread.authorize(creds)
        spreadsheet = client.open_by_key(self._settings.google_sheet_id)
        if self._settings.google_sheet_worksheet:
            return spreadsheet.worksheet(self._settings.google_sheet_worksheet)
        return spreadsheet.sheet1

    def _append_row(self, record: CustomerRecord) -> None:
        worksheet = self._open_worksheet()
        timestamp = datetime.now(timezone.utc).isoformat()
        worksheet.append_row(customer_row(record, timestamp), value_input_option="USER_ENTERED")

    async def push(self, record: CustomerRecord) -> None:
        """Append the customer to the configured Google Sheet."""

        if not self._settings.google_sheets_enabled:
            raise IntegrationError("Google Sheets integration is not configured")
        try:
            await asyncio.to_thread(self._append_row, record)
        except (
            gspread.exceptions.GSpreadException,
            GoogleAuthError,
            requests.exceptions.RequestException,
            OSError,
            ValueError,
        ) as exc:
            raise IntegrationError(f"Google Sheets append failed: {exc}") from exc
        logger.info("Appended customer to Google Sheet", extra={"customer_id": record.id})
