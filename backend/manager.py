import itertools
import threading
from typing import Any, Dict, List, Optional

from loguru import logger

import csvio
from errors import CoercionError, ImportFormatError, StoreError
from schemas import RecordSchema, coerce


class RecordManager:
    """List, create, delete, export and bulk-import rows of one table.

    The manager owns the last loaded page of rows, the create-form buffer and
    the pasted CSV buffer for its schema. Store calls run outside the lock;
    local state is only replaced once a call has succeeded.
    """

    def __init__(self, schema: RecordSchema, store, page_size: int = 50):
        self.schema = schema
        self.store = store
        self.page_size = page_size
        self.rows: List[Dict[str, Any]] = []
        self.form: Dict[str, Any] = {}
        self.csv_text = ""
        self.loaded = False
        self._lock = threading.Lock()
        self._tickets = itertools.count(1)
        self._latest_ticket = 0

    @property
    def title(self) -> str:
        return self.schema.title

    def load(self) -> bool:
        """Replace the row set with the first page of the table.

        Returns False when a newer load was issued while this one was waiting
        on the store; its rows are then discarded.
        """
        with self._lock:
            ticket = next(self._tickets)
            self._latest_ticket = ticket
        try:
            rows = self.store.select(self.schema.table_name, limit=self.page_size)
        except StoreError as e:
            logger.error(f"{self.title}: load failed: {e.detail}")
            raise StoreError(e.detail, title=f"{self.title}: load failed", status_code=e.status_code) from e
        with self._lock:
            if ticket != self._latest_ticket:
                logger.warning(f"{self.title}: discarding stale load #{ticket}")
                return False
            self.rows = list(rows or [])
            self.loaded = True
        logger.info(f"{self.title}: loaded {len(self.rows)} rows")
        return True

    def _refresh(self):
        # the write already went through, a failed reload is only reported
        try:
            self.load()
        except StoreError:
            pass

    # --- form -----------------------------------------------------------

    def update_form(self, values: Dict[str, Any]) -> Dict[str, Any]:
        keys = set(self.schema.keys)
        with self._lock:
            for key, value in (values or {}).items():
                if key in keys:
                    self.form[key] = value
                else:
                    logger.warning(f"{self.title}: ignoring unknown form field {key!r}")
            return dict(self.form)

    def coerce(self, form: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        with self._lock:
            buffer = dict(self.form if form is None else form)
        try:
            return coerce(buffer, self.schema.fields)
        except CoercionError as e:
            logger.warning(f"{self.title}: invalid input: {e.detail}")
            raise CoercionError(e.detail, title=f"{self.title}: invalid input", label=e.label) from e

    def create(self) -> Dict[str, Any]:
        record = self.coerce()
        try:
            self.store.insert(self.schema.table_name, record)
        except StoreError as e:
            logger.error(f"{self.title}: create failed: {e.detail}")
            raise StoreError(e.detail, title=f"{self.title}: create failed", status_code=e.status_code) from e
        with self._lock:
            self.form = {}
        logger.success(f"{self.title}: saved")
        self._refresh()
        return record

    def delete(self, key_value) -> None:
        try:
            self.store.delete(self.schema.table_name, self.schema.primary_key_field, key_value)
        except StoreError as e:
            logger.error(f"{self.title}: delete failed: {e.detail}")
            raise StoreError(e.detail, title=f"{self.title}: delete failed", status_code=e.status_code) from e
        logger.success(f"{self.title}: deleted {self.schema.primary_key_field}={key_value}")
        self._refresh()

    # --- CSV ------------------------------------------------------------

    def export_csv(self) -> csvio.CsvExport:
        with self._lock:
            rows = list(self.rows)
        content = csvio.encode_rows(self.schema.keys, rows)
        return csvio.CsvExport(filename=csvio.export_filename(self.schema.table_name), content=content)

    def import_csv(self, text: Optional[str] = None) -> List[Dict[str, Any]]:
        """Parse the CSV buffer (or ``text``, which replaces it) and bulk insert it."""
        with self._lock:
            if text is not None:
                self.csv_text = text
            buffer = self.csv_text
        records = csvio.parse_records(buffer)
        if not records:
            logger.warning(f"{self.title}: import needs a header line and at least one data line")
            raise ImportFormatError(
                "Paste a header line followed by at least one data line",
                title=f"{self.title}: import failed",
            )
        try:
            self.store.insert(self.schema.table_name, records)
        except StoreError as e:
            logger.error(f"{self.title}: import failed: {e.detail}")
            raise StoreError(e.detail, title=f"{self.title}: import failed", status_code=e.status_code) from e
        with self._lock:
            self.csv_text = ""
        logger.success(f"{self.title}: imported {len(records)} rows")
        self._refresh()
        return records
