"""
Google Sheets Row Store
Range-level reads and writes against the worklog spreadsheet.

Every gspread/requests failure leaving this module is translated into a
StoreError subclass so callers only deal with one error vocabulary.

For tests, inject a fake spreadsheet via `from_spreadsheet(spreadsheet)`,
avoiding any real API calls.
"""
from __future__ import annotations

from typing import Dict, List, Optional

import gspread
import requests
from oauth2client.service_account import ServiceAccountCredentials

import config
from sheets.store_errors import MalformedResponseError, NetworkError, from_api_error


def _get_client():
    """Create a gspread client from the configured credentials source."""
    scope = [
        'https://spreadsheets.google.com/feeds',
        'https://www.googleapis.com/auth/drive',
    ]
    creds_path = config.get_credentials_path()
    if creds_path:
        creds = ServiceAccountCredentials.from_json_keyfile_name(creds_path, scope)
        return gspread.authorize(creds)
    else:
        import google.auth

        credentials, _ = google.auth.default(scopes=scope)
        return gspread.authorize(credentials)


def qualify_range(sheet_name: str, a1_range: str) -> str:
    """Prefix an A1 range with a quoted sheet name (quotes doubled)."""
    escaped = sheet_name.replace("'", "''")
    return f"'{escaped}'!{a1_range}"


class SheetsRowStore:
    """
    Thin wrapper around one spreadsheet exposing the three operations the
    reconciler needs: list tabs, read a range, write a set of ranges.
    """

    def __init__(self, spreadsheet: Optional[object] = None, sheet_id: Optional[str] = None):
        if spreadsheet is not None:
            self.spreadsheet = spreadsheet
            return

        target_sheet_id = sheet_id or config.GOOGLE_SHEET_ID
        if not target_sheet_id:
            raise ValueError("GOOGLE_SHEET_ID must be set")
        try:
            self.spreadsheet = _get_client().open_by_key(target_sheet_id)
        except gspread.exceptions.APIError as e:
            raise from_api_error(e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not reach Google Sheets: {e}") from e

    @classmethod
    def from_spreadsheet(cls, spreadsheet: object) -> 'SheetsRowStore':
        """Helper for unit tests to inject a fake spreadsheet."""
        return cls(spreadsheet=spreadsheet)

    def list_sheet_names(self) -> List[str]:
        """Titles of every tab in the spreadsheet."""
        try:
            return [ws.title for ws in self.spreadsheet.worksheets()]
        except gspread.exceptions.APIError as e:
            raise from_api_error(e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not list sheets: {e}") from e

    def read_column_range(
        self,
        sheet_name: str,
        a1_range: str,
        value_render_option: Optional[str] = None,
    ) -> List[List[str]]:
        """
        Read a range as a list of rows.

        Args:
            sheet_name: Tab title
            a1_range: Range without the sheet prefix, e.g. 'A:A' or 'A5:P5'
            value_render_option: 'FORMULA' to get formulas instead of their results

        Returns:
            Rows of cell values; trailing empty rows/cells are omitted by the API.
        """
        params = {'valueRenderOption': value_render_option} if value_render_option else None
        try:
            response = self.spreadsheet.values_get(qualify_range(sheet_name, a1_range), params=params)
        except gspread.exceptions.APIError as e:
            raise from_api_error(e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not read {sheet_name}!{a1_range}: {e}") from e

        if not isinstance(response, dict):
            raise MalformedResponseError(f"Unexpected response for {sheet_name}!{a1_range}: {type(response).__name__}")
        values = response.get('values', [])
        if not isinstance(values, list) or not all(isinstance(row, list) for row in values):
            raise MalformedResponseError(f"'values' is not a list of rows for {sheet_name}!{a1_range}")
        return values

    def write_column_ranges(self, sheet_name: str, updates: List[Dict]) -> None:
        """
        Write several ranges in one batch call.

        Args:
            sheet_name: Tab title
            updates: [{'range': 'C5:F5', 'values': [[...]]}, ...]
        """
        if not updates:
            return
        body = {
            'valueInputOption': 'USER_ENTERED',
            'data': [
                {'range': qualify_range(sheet_name, u['range']), 'values': u['values']}
                for u in updates
            ],
        }
        try:
            self.spreadsheet.values_batch_update(body)
        except gspread.exceptions.APIError as e:
            raise from_api_error(e) from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Could not write to {sheet_name}: {e}") from e
