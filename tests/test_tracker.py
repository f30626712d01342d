import datetime
import logging
from decimal import Decimal

import pytest

from src import tracker
from src.tracker import CURRENT_CURSOR, RecordStore
from src.models import Category, InvalidAmount, InvalidCategory, InvalidDate, Record, RecordNotFound

TODAY = datetime.date(2026, 10, 19)


def make_store(**kwargs):
    return RecordStore(today=lambda: TODAY, lookback_days=10, **kwargs)


def test_submit_creates_record_at_front():
    store = make_store()
    store.submit("45.50", "food", TODAY, " lunch ")
    assert len(store) == 1
    record = store.records[0]
    assert record.amount == Decimal("45.50")
    assert record.category is Category.FOOD
    assert record.note == "lunch"
    assert record.created_at == TODAY
    assert store.editing_id is None

    second = store.submit("12", Category.TRANSPORT, TODAY, "")
    assert len(store) == 2
    assert store.records[0] is second
    assert store.records[1] is record


@pytest.mark.parametrize("text", [
    "abc", "", "   ", "0", "-3", "0.00", "nan", "Infinity",
    "1e5000", "1e999999999", "1e12", "1e-9", "1e-5000",
])
def test_submit_rejects_invalid_amount(text):
    store = make_store()
    store.submit("10", "food", TODAY)
    with pytest.raises(InvalidAmount):
        store.submit(text, "food", TODAY, "note")
    assert len(store) == 1


def test_submit_rejects_unknown_category():
    store = make_store()
    with pytest.raises(InvalidCategory):
        store.submit("10", "rent", TODAY)
    assert len(store) == 0


def test_submit_enforces_date_window():
    store = make_store()
    store.submit("10", "food", TODAY - datetime.timedelta(days=10))
    with pytest.raises(InvalidDate):
        store.submit("10", "food", TODAY - datetime.timedelta(days=11))
    with pytest.raises(InvalidDate):
        store.submit("10", "food", TODAY + datetime.timedelta(days=1))
    assert len(store) == 1


def test_edit_replaces_record_in_place():
    store = make_store()
    first = store.submit("45.50", "food", TODAY, "lunch")
    store.submit("8", "transport", TODAY, "bus")
    store.submit("20", "shopping", TODAY, "")

    form = store.begin_edit(first.id)
    assert store.editing_id == first.id
    assert form.amount_text == "45.5"
    assert form.note == "lunch"

    updated = store.submit("50", "food", TODAY, "")
    assert len(store) == 3
    assert store.records[2] is updated
    assert updated.id == first.id
    assert updated.amount == Decimal("50")
    assert updated.note == ""
    assert store.editing_id is None


def test_invalid_amount_while_editing_keeps_cursor():
    store = make_store()
    record = store.submit("5", "food", TODAY)
    store.begin_edit(record.id)
    with pytest.raises(InvalidAmount):
        store.submit("abc", "food", TODAY)
    assert store.editing_id == record.id
    assert store.records[0] is record


def test_edit_keeps_original_date_outside_window():
    old = TODAY - datetime.timedelta(days=30)
    store = make_store()
    store.submit("5", "other", TODAY)
    # seed an aged record directly, as if it had been entered weeks ago
    aged = Record(amount=Decimal("3"), category=Category.OTHER, created_at=old)
    store.records.append(aged)

    store.begin_edit(aged.id)
    updated = store.submit("4", "other", old, "")
    assert updated.created_at == old
    assert store.records[1].amount == Decimal("4")


def test_submit_with_stale_editing_id_creates_new_record():
    store = make_store()
    record = store.submit("5", "food", TODAY)
    store.begin_edit(record.id)
    store.records.clear()
    created = store.submit("7", "food", TODAY)
    assert created.id != record.id
    assert store.records == [created]
    assert store.editing_id is None


def test_begin_edit_unknown_id_raises():
    store = make_store()
    record = store.submit("5", "food", TODAY)
    store.delete(record.id)
    with pytest.raises(RecordNotFound):
        store.begin_edit(record.id)
    assert store.editing_id is None


def test_cancel_edit_resets_form():
    store = make_store()
    record = store.submit("5", "shopping", TODAY, "socks")
    store.begin_edit(record.id)
    store.cancel_edit()
    assert store.editing_id is None
    assert store.form.amount_text == ""
    assert store.form.note == ""
    assert len(store) == 1


def test_delete_by_id():
    store = make_store()
    a = store.submit("1", "food", TODAY)
    b = store.submit("2", "food", TODAY)
    c = store.submit("3", "food", TODAY)
    assert store.delete(b.id) is True
    assert store.records == [c, a]
    assert store.delete(b.id) is False


def test_delete_edited_record_clears_cursor():
    store = make_store()
    a = store.submit("1", "food", TODAY)
    store.begin_edit(a.id)
    store.delete(a.id)
    assert store.editing_id is None
    assert store.form.amount_text == ""


def test_delete_at_positions_uses_one_snapshot():
    store = make_store()
    a = store.submit("1", "food", TODAY)
    b = store.submit("2", "food", TODAY)
    c = store.submit("3", "food", TODAY)
    # list is [c, b, a]
    removed = store.delete_at_positions({0, 2})
    assert removed == [c, a]
    assert store.records == [b]


def test_delete_at_positions_ignores_bad_positions():
    store = make_store()
    a = store.submit("1", "food", TODAY)
    b = store.submit("2", "food", TODAY)
    removed = store.delete_at_positions([1, 1, 5, -1])
    assert removed == [a]
    assert store.records == [b]


def test_delete_at_positions_clears_cursor_for_edited_record():
    store = make_store()
    a = store.submit("1", "food", TODAY)
    b = store.submit("2", "food", TODAY)
    store.begin_edit(a.id)
    store.delete_at_positions([0])
    assert store.editing_id == a.id
    store.delete_at_positions([0])
    assert store.editing_id is None
    assert len(store) == 0
    assert b not in store.records


def test_submit_form_flags_invalid_amount():
    store = make_store()
    store.form.amount_text = "abc"
    store.form.note = "dinner"
    assert store.submit_form() is False
    assert store.form.show_input_error is True
    assert store.form.amount_text == "abc"
    assert store.form.note == "dinner"
    assert len(store) == 0

    store.form.amount_text = "30"
    assert store.submit_form() is True
    assert store.form.show_input_error is False
    assert store.form.amount_text == ""
    assert store.records[0].note == "dinner"


def test_reset_keeps_selected_category():
    store = make_store()
    store.form.amount_text = "9"
    store.form.category = Category.ENTERTAINMENT
    assert store.submit_form() is True
    assert store.form.category is Category.ENTERTAINMENT
    assert store.form.date == TODAY


def test_snapshot():
    store = make_store()
    record = store.submit("45.50", "food", TODAY, "lunch")
    store.begin_edit(record.id)
    snap = store.snapshot()
    assert snap["editing_id"] == str(record.id)
    assert snap["records"][0]["amount"] == "45.50"
    assert snap["form"]["amount_text"] == "45.5"


def test_largest_amount_round_trips_through_edit():
    store = make_store()
    record = store.submit("999999999999.99", "shopping", TODAY)
    form = store.begin_edit(record.id)
    assert form.amount_text == "999999999999.99"
    small = store.submit("0.00000001", "shopping", TODAY)
    assert store.begin_edit(small.id).amount_text == "0.00000001"


def test_submit_editing_id_none_forces_create():
    store = make_store()
    record = store.submit("5", "food", TODAY)
    store.begin_edit(record.id)
    created = store.submit("6", "food", TODAY, editing_id=None)
    assert len(store) == 2
    assert store.records[0] is created
    assert store.records[1] is record
    assert store.editing_id is None


def test_submit_current_cursor_updates_edited_record():
    store = make_store()
    record = store.submit("5", "food", TODAY)
    store.begin_edit(record.id)
    updated = store.submit("6", "food", TODAY, editing_id=CURRENT_CURSOR)
    assert store.records == [updated]
    assert updated.id == record.id
    assert repr(CURRENT_CURSOR) == "CURRENT_CURSOR"


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("TRACKER_LOG_LEVEL", "debug")
    assert tracker._env_log_level() == logging.DEBUG
    monkeypatch.delenv("TRACKER_LOG_LEVEL")
    assert tracker._env_log_level() == logging.INFO


def test_unknown_log_level_falls_back_to_info(monkeypatch, caplog):
    monkeypatch.setenv("TRACKER_LOG_LEVEL", "verbose")
    with caplog.at_level(logging.WARNING, logger="src.tracker"):
        assert tracker._env_log_level() == logging.INFO
    assert "Ignoring unknown TRACKER_LOG_LEVEL='VERBOSE'" in caplog.text
