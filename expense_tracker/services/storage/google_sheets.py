"""
Google Sheets Document Store

DESIGN DECISION: Google Sheets is used as the hosted backend because:
1. Users can view their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (each call touches one record)
- Limited query capabilities (we filter in Python)

Each logical collection is one worksheet. A row holds the record id in
column A and the record's fields as JSON in column B, so records stay
schemaless like any other document store.
"""

import json
from typing import Optional
from uuid import uuid4

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from expense_tracker.config import GoogleSheetsSettings, get_settings
from expense_tracker.services.storage.interface import (
    ConnectionError,
    DocumentStoreInterface,
    Filters,
    NotFoundError,
    StorageError,
    matches,
)


RECORD_COLUMNS = ["id", "data_json"]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_collection_sheet(self, collection: str) -> gspread.Worksheet:
        """Get or create the worksheet backing a collection."""
        title = self._settings.worksheet_for(collection)
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(RECORD_COLUMNS),
            )
            sheet.append_row(RECORD_COLUMNS)
        return sheet


class GoogleSheetsDocumentStore(DocumentStoreInterface):
    """
    Google Sheets implementation of the document store.

    Lookups scan the worksheet; row 1 is the header.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _row_to_record(row: list) -> dict:
        data = json.loads(row[1]) if len(row) > 1 and row[1] else {}
        return {"id": row[0], **data}

    @staticmethod
    def _encode(record: dict) -> str:
        return json.dumps({k: v for k, v in record.items() if k != "id"})

    def _find_row(self, sheet: gspread.Worksheet, record_id: str) -> Optional[tuple[int, list]]:
        all_rows = sheet.get_all_values()
        for idx, row in enumerate(all_rows[1:], start=2):  # Row 1 is header
            if row and row[0] == record_id:
                return idx, row
        return None

    async def create(
        self,
        collection: str,
        record: dict,
        record_id: Optional[str] = None,
    ) -> str:
        # Id is fixed before the first attempt; a retry overwrites its own row
        return await self._put(collection, record, record_id or uuid4().hex)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def _put(self, collection: str, record: dict, record_id: str) -> str:
        try:
            sheet = self._client.get_collection_sheet(collection)
            found = self._find_row(sheet, record_id)
            if found:
                sheet.update_cell(found[0], 2, self._encode(record))
            else:
                sheet.append_row([record_id, self._encode(record)], value_input_option="RAW")
            return record_id
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to create record in {collection}: {e}")

    async def get(self, collection: str, record_id: str) -> Optional[dict]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            found = self._find_row(sheet, record_id)
            return self._row_to_record(found[1]) if found else None
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to get record from {collection}: {e}")

    async def update(self, collection: str, record_id: str, partial: dict) -> None:
        try:
            sheet = self._client.get_collection_sheet(collection)
            found = self._find_row(sheet, record_id)
            if not found:
                raise NotFoundError(f"Record not found: {collection}/{record_id}")
            row_idx, row = found
            merged = {**self._row_to_record(row), **partial}
            sheet.update_cell(row_idx, 2, self._encode(merged))
        except (NotFoundError, ConnectionError):
            raise
        except Exception as e:
            raise StorageError(f"Failed to update record in {collection}: {e}")

    async def delete(self, collection: str, record_id: str) -> None:
        try:
            sheet = self._client.get_collection_sheet(collection)
            found = self._find_row(sheet, record_id)
            if found:
                sheet.delete_rows(found[0])
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete record from {collection}: {e}")

    async def query(self, collection: str, filters: Filters) -> list[dict]:
        try:
            sheet = self._client.get_collection_sheet(collection)
            all_rows = sheet.get_all_values()[1:]  # Skip header

            records = []
            for row in all_rows:
                if not row or not row[0]:  # Skip empty rows
                    continue
                record = self._row_to_record(row)
                if matches(record, filters):
                    records.append(record)
            return records
        except ConnectionError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to query {collection}: {e}")
