"""
models.py - Data model definitions

This file defines the Record dataclass, the closed Category set and the
FormState that backs the entry form. Records are immutable: an edit replaces
the whole Record at its position in the store (see src.tracker).

Records and form state serialize to/from plain dicts so the view layer can
work with read-only snapshots.
"""

from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Dict, Any, Optional, Tuple
import datetime
import uuid


class InvalidAmount(ValueError):
    """Amount text is not a finite number greater than zero."""


class InvalidCategory(ValueError):
    """Category is not one of the closed Category set."""


class InvalidDate(ValueError):
    """Date falls outside the allowed entry window."""


class RecordNotFound(LookupError):
    """No record with the requested id exists in the store."""


class Category(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    OTHER = "other"

    @property
    def label(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_str(cls, value: Any) -> "Category":
        """Coerce a Category or its (case-insensitive) value string."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise InvalidCategory(f"Unsupported category: {value!r}") from exc


DEFAULT_CATEGORY = Category.FOOD


# bounds on Decimal.adjusted() for an amount: 1e-8 up to just under 1e12
MAX_AMOUNT_EXPONENT = 11
MIN_AMOUNT_EXPONENT = -8


def parse_amount(text: Any) -> Decimal:
    """
    Parse user-typed amount text into a positive Decimal.

    Raises InvalidAmount for empty, non-numeric, NaN/infinite or non-positive
    input, and for magnitudes outside 1e-8 .. 1e12 (e.g. "1e5000").
    """
    raw = str(text if text is not None else "").strip()
    if not raw:
        raise InvalidAmount("Amount is required")
    try:
        amount = Decimal(raw)
    except InvalidOperation as exc:
        raise InvalidAmount(f"Amount {raw!r} is not a number") from exc
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmount(f"Amount {raw!r} must be greater than 0")
    if not MIN_AMOUNT_EXPONENT <= amount.adjusted() <= MAX_AMOUNT_EXPONENT:
        raise InvalidAmount(f"Amount {raw!r} is out of range")
    return amount


def format_amount_text(amount: Decimal) -> str:
    """Render an amount back into form text: whole numbers without decimals."""
    if amount == amount.to_integral_value():
        return str(int(amount))
    return format(amount.normalize(), "f")


def allowed_date_range(today: datetime.date, lookback_days: int) -> Tuple[datetime.date, datetime.date]:
    """Return the inclusive (start, end) window a record date may fall in."""
    return today - datetime.timedelta(days=lookback_days), today


def validate_record_date(value: datetime.date, today: datetime.date, lookback_days: int) -> datetime.date:
    """Return value unchanged if it is inside the allowed window, else raise InvalidDate."""
    if isinstance(value, datetime.datetime):
        value = value.date()
    if not isinstance(value, datetime.date):
        raise InvalidDate(f"Not a date: {value!r}")
    start, end = allowed_date_range(today, lookback_days)
    if not start <= value <= end:
        raise InvalidDate(f"Date {value.isoformat()} is outside {start.isoformat()}..{end.isoformat()}")
    return value


@dataclass(frozen=True)
class Record:
    """
    Represents a single expense entry.

    Fields:
      - amount: positive Decimal (validated by parse_amount before construction)
      - category: one of Category
      - created_at: the date the expense happened
      - note: optional free text, already trimmed
      - id: opaque UUID assigned at creation, kept across edits
    """
    amount: Decimal
    category: Category
    created_at: datetime.date
    note: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict with string id, amount and ISO date."""
        return {
            "id": str(self.id),
            "amount": str(self.amount),
            "category": self.category.value,
            "created_at": self.created_at.isoformat(),
            "note": self.note,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "Record":
        """Inverse of to_dict."""
        return Record(
            id=uuid.UUID(str(d["id"])),
            amount=Decimal(str(d["amount"])),
            category=Category.from_str(d["category"]),
            created_at=datetime.date.fromisoformat(str(d["created_at"])),
            note=d.get("note", "") or "",
        )


@dataclass
class FormState:
    """Values currently shown in the entry form."""
    amount_text: str = ""
    category: Category = DEFAULT_CATEGORY
    date: datetime.date = field(default_factory=datetime.date.today)
    note: str = ""
    show_input_error: bool = False

    @classmethod
    def blank(cls, today: Optional[datetime.date] = None, category: Category = DEFAULT_CATEGORY) -> "FormState":
        # the category picker keeps its last selection across resets
        return cls(category=category, date=today or datetime.date.today())

    @classmethod
    def from_record(cls, record: Record) -> "FormState":
        return cls(
            amount_text=format_amount_text(record.amount),
            category=record.category,
            date=record.created_at,
            note=record.note,
        )

    def copy(self) -> "FormState":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount_text": self.amount_text,
            "category": self.category.value,
            "date": self.date.isoformat(),
            "note": self.note,
            "show_input_error": self.show_input_error,
        }

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "FormState":
        return FormState(
            amount_text=d.get("amount_text", "") or "",
            category=Category.from_str(d.get("category", DEFAULT_CATEGORY)),
            date=datetime.date.fromisoformat(d["date"]) if d.get("date") else datetime.date.today(),
            note=d.get("note", "") or "",
            show_input_error=bool(d.get("show_input_error", False)),
        )
