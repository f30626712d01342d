"""
tracker.py - core application logic

Responsibilities:
 - keep an in-memory, newest-first list of Record objects
 - track which record (if any) is being edited and the form values shown to the user
 - provide the intents consumed by the UI:
     submit / submit_form, begin_edit, cancel_edit,
     delete (by id), delete_at_positions (by list index)

Nothing is persisted: the store lives in the Streamlit session and is discarded with it.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple, Union, Any
import datetime
import logging
import os
import uuid

from src.models import (
    Category,
    FormState,
    InvalidAmount,
    Record,
    RecordNotFound,
    allowed_date_range,
    parse_amount,
    validate_record_date,
)

# ensure a logger is available
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


def _env_log_level(name: str = "TRACKER_LOG_LEVEL", default: int = logging.INFO) -> int:
    raw = (os.getenv(name) or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    # unknown names come back as the string "Level <NAME>"
    if not isinstance(level, int):
        logger.warning("Ignoring unknown %s=%r, using %s", name, raw, logging.getLevelName(default))
        return default
    return level


logger.setLevel(_env_log_level())


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r, using %d", name, raw, default)
        return default


# how many days back a record date may be entered
LOOKBACK_DAYS = _env_int("RECORD_LOOKBACK_DAYS", 10)
# currency code shown next to amounts in the list
CURRENCY = (os.getenv("RECORD_CURRENCY") or "CNY").strip() or "CNY"


class _CurrentCursor:
    """Default for RecordStore.submit(editing_id=...): use the store's own editing cursor."""

    def __repr__(self):
        return "CURRENT_CURSOR"


CURRENT_CURSOR = _CurrentCursor()


class RecordStore:
    """
    Session-scoped record collection plus editing cursor and form state.

    The cursor has two modes: creating (editing_id is None) and editing(id).
    Every successful submit, cancel_edit, or delete of the edited record
    returns the store to creating mode and resets the form.
    """

    def __init__(self, records: Optional[Iterable[Record]] = None,
                 lookback_days: int = LOOKBACK_DAYS,
                 today: Callable[[], datetime.date] = datetime.date.today):
        # newest first
        self.records: List[Record] = list(records or [])
        self.editing_id: Optional[uuid.UUID] = None
        self.lookback_days = lookback_days
        self._today = today
        self.form = FormState.blank(self._today())

    def __len__(self) -> int:
        return len(self.records)

    @property
    def is_editing(self) -> bool:
        return self.editing_id is not None

    def allowed_date_range(self) -> Tuple[datetime.date, datetime.date]:
        return allowed_date_range(self._today(), self.lookback_days)

    def get(self, record_id: uuid.UUID) -> Optional[Record]:
        return next((r for r in self.records if r.id == record_id), None)

    def _index_of(self, record_id: Optional[uuid.UUID]) -> Optional[int]:
        if record_id is None:
            return None
        for i, r in enumerate(self.records):
            if r.id == record_id:
                return i
        return None

    def _reset_form(self):
        self.editing_id = None
        self.form = FormState.blank(self._today(), category=self.form.category)

    # -----------------------
    # Intents
    # -----------------------
    def submit(self, amount_text: str, category: Any, date: datetime.date,
               note: str = "",
               editing_id: Union[uuid.UUID, None, _CurrentCursor] = CURRENT_CURSOR) -> Record:
        """
        Validate the input and create or update a record.

        editing_id defaults to CURRENT_CURSOR (the store's own cursor); pass
        None to force create mode. If it resolves to an existing record, that
        record is replaced in place (same id, same position); otherwise a new
        record is inserted at the front.

        Raises InvalidAmount, InvalidCategory or InvalidDate without touching
        the records or the cursor.
        """
        if editing_id is CURRENT_CURSOR:
            editing_id = self.editing_id
        amount = parse_amount(amount_text)
        category = Category.from_str(category)
        index = self._index_of(editing_id)
        # an edited record may keep its original date after it ages out of the window
        if index is None or self.records[index].created_at != date:
            date = validate_record_date(date, self._today(), self.lookback_days)
        note = (note or "").strip()

        if index is not None:
            record = Record(id=editing_id, amount=amount, category=category, created_at=date, note=note)
            self.records[index] = record
            logger.info("Updated record id=%s (category=%s, amount=%s)", record.id, category.value, amount)
        else:
            if editing_id is not None:
                logger.warning("Editing id=%s no longer exists, creating a new record", editing_id)
            record = Record(amount=amount, category=category, created_at=date, note=note)
            self.records.insert(0, record)
            logger.info("Added record id=%s (category=%s, amount=%s). Records=%d.",
                        record.id, category.value, amount, len(self.records))

        self._reset_form()
        return record

    def submit_form(self) -> bool:
        """
        Submit the values currently held in self.form.

        Returns True on success (form reset). On an invalid amount the error flag
        is raised and the typed values are kept so the user can correct them.
        """
        form = self.form
        try:
            self.submit(form.amount_text, form.category, form.date, form.note)
        except InvalidAmount as exc:
            logger.info("Rejected submission: %s", exc)
            form.show_input_error = True
            return False
        return True

    def begin_edit(self, record_id: uuid.UUID) -> FormState:
        """
        Enter edit mode for record_id and load its values into the form.
        Returns a copy of the populated form. Raises RecordNotFound for unknown ids.
        """
        record = self.get(record_id)
        if record is None:
            logger.warning("begin_edit called with unknown id=%s", record_id)
            raise RecordNotFound(f"Record {record_id} not found")
        self.editing_id = record.id
        self.form = FormState.from_record(record)
        return self.form.copy()

    def cancel_edit(self):
        """Leave edit mode and reset the form; records are untouched."""
        self._reset_form()

    def delete(self, record_id: uuid.UUID) -> bool:
        """Remove every record with record_id. Returns True if anything was removed."""
        before = len(self.records)
        self.records = [r for r in self.records if r.id != record_id]
        removed = before - len(self.records)
        if self.editing_id == record_id:
            self.cancel_edit()
        if not removed:
            logger.info("Record id=%s not found", record_id)
            return False
        logger.info("Deleted record id=%s. Remaining records=%d.", record_id, len(self.records))
        return True

    def delete_at_positions(self, positions: Iterable[int]) -> List[Record]:
        """
        Remove the records at the given list positions.

        Positions refer to the list as it is before this call; duplicates
        collapse and out-of-range positions are skipped. Returns the removed
        records in list order.
        """
        targets = set()
        for pos in positions:
            pos = int(pos)
            if 0 <= pos < len(self.records):
                targets.add(pos)
            else:
                logger.warning("Ignoring out-of-range position %d (records=%d)", pos, len(self.records))

        removed = [r for i, r in enumerate(self.records) if i in targets]
        if self.editing_id is not None and any(r.id == self.editing_id for r in removed):
            self.cancel_edit()
        self.records = [r for i, r in enumerate(self.records) if i not in targets]
        if removed:
            logger.info("Deleted %d record(s) at positions %s. Remaining records=%d.",
                        len(removed), sorted(targets), len(self.records))
        return removed

    def snapshot(self) -> Dict[str, Any]:
        """Read-only view of the store for rendering."""
        return {
            "records": [r.to_dict() for r in self.records],
            "editing_id": str(self.editing_id) if self.editing_id else None,
            "form": self.form.to_dict(),
        }
