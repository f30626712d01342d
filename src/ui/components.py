"""
components.py - reusable Streamlit components / forms / displays

This module contains the UI pieces used by the dashboard:
 - display_record_form(store)      amount / note / date / category inputs
 - display_action_buttons(store)   save-or-update and cancel-edit
 - display_record_list(store)      rows with edit/delete, plus list editing mode (tick rows, delete selected)
 - display_analysis_placeholder()

Widgets never mutate the store directly. Buttons dispatch intents through
on_click callbacks, which run before the next rerun, so the callbacks are also
the only place where widget values are pushed back from store.form.
"""

from typing import List, Optional
import datetime
import uuid

import pandas as pd
import streamlit as st

from src.models import Category, InvalidCategory, InvalidDate, Record, RecordNotFound
from src.tracker import CURRENCY, RecordStore

# session_state keys owned by the form widgets
AMOUNT_KEY = "form_amount"
NOTE_KEY = "form_note"
DATE_KEY = "form_date"
CATEGORY_KEY = "form_category"
# one-shot message shown above the form (stale ids, out-of-window dates)
NOTICE_KEY = "form_notice"
# prefix of the per-row checkboxes used by list editing mode
SELECT_KEY_PREFIX = "select_"

INVALID_AMOUNT_MESSAGE = "Please enter a valid amount"


def _push_form_to_widgets(store: RecordStore):
    form = store.form
    st.session_state[AMOUNT_KEY] = form.amount_text
    st.session_state[NOTE_KEY] = form.note
    st.session_state[DATE_KEY] = form.date
    st.session_state[CATEGORY_KEY] = form.category.value


def _pull_form_from_widgets(store: RecordStore):
    form = store.form
    form.amount_text = st.session_state.get(AMOUNT_KEY, form.amount_text)
    form.note = st.session_state.get(NOTE_KEY, form.note)
    form.date = st.session_state.get(DATE_KEY, form.date)
    form.category = Category.from_str(st.session_state.get(CATEGORY_KEY, form.category.value))


def init_form_state(store: RecordStore):
    """Seed the widget keys from the store on the first run of a session."""
    if AMOUNT_KEY not in st.session_state:
        _push_form_to_widgets(store)


# -----------------------
# Intent callbacks
# -----------------------
def _on_submit(store: RecordStore):
    st.session_state.pop(NOTICE_KEY, None)
    _pull_form_from_widgets(store)
    try:
        ok = store.submit_form()
    except (InvalidDate, InvalidCategory) as exc:
        st.session_state[NOTICE_KEY] = str(exc)
        return
    if ok:
        _push_form_to_widgets(store)


def _on_cancel_edit(store: RecordStore):
    st.session_state.pop(NOTICE_KEY, None)
    store.cancel_edit()
    _push_form_to_widgets(store)


def _on_begin_edit(store: RecordStore, record_id: uuid.UUID):
    st.session_state.pop(NOTICE_KEY, None)
    try:
        store.begin_edit(record_id)
    except RecordNotFound:
        st.session_state[NOTICE_KEY] = "That record no longer exists."
        return
    _push_form_to_widgets(store)


def _on_delete(store: RecordStore, record_id: uuid.UUID):
    was_editing = store.editing_id == record_id
    store.delete(record_id)
    if was_editing:
        _push_form_to_widgets(store)


def _select_key(record_id: uuid.UUID) -> str:
    return f"{SELECT_KEY_PREFIX}{record_id}"


def selected_positions(store: RecordStore) -> List[int]:
    """List positions whose list-editing checkbox is ticked."""
    return [i for i, r in enumerate(store.records) if st.session_state.get(_select_key(r.id))]


def _on_delete_selected(store: RecordStore):
    editing_before = store.editing_id
    removed = store.delete_at_positions(selected_positions(store))
    for r in removed:
        st.session_state.pop(_select_key(r.id), None)
    if editing_before is not None and store.editing_id is None:
        _push_form_to_widgets(store)


# -----------------------
# Displays
# -----------------------
def display_record_form(store: RecordStore):
    """Amount, note, date and category inputs bound to store.form via session_state."""
    notice: Optional[str] = st.session_state.get(NOTICE_KEY)
    if notice:
        st.warning(notice)

    st.text_input("Amount", key=AMOUNT_KEY, placeholder="e.g. 45.50")
    if store.form.show_input_error:
        st.error(INVALID_AMOUNT_MESSAGE)
    st.text_input("Note", key=NOTE_KEY, placeholder="Optional: e.g. lunch")

    start, end = store.allowed_date_range()
    # an edited record may be older than the window; widen it so the widget accepts the value
    current = st.session_state.get(DATE_KEY, end)
    if isinstance(current, datetime.date) and current < start:
        start = current
    st.date_input("Date", key=DATE_KEY, min_value=start, max_value=end)

    st.radio(
        "Category",
        options=[c.value for c in Category],
        format_func=lambda v: Category(v).label,
        key=CATEGORY_KEY,
        horizontal=True,
    )


def display_action_buttons(store: RecordStore):
    """Primary save/update button and, while editing, a cancel button."""
    label = "Update record" if store.is_editing else "Save record"
    st.button(label, key="save_record", type="primary", on_click=_on_submit, args=(store,))
    if store.is_editing:
        st.button("Cancel edit", key="cancel_edit", on_click=_on_cancel_edit, args=(store,))


def _records_frame(records: List[Record]) -> pd.DataFrame:
    rows = []
    for r in records:
        rows.append({
            "Category": r.category.label,
            "Date": r.created_at.isoformat(),
            "Note": r.note,
            "Amount": float(r.amount),
        })
    return pd.DataFrame(rows, columns=["Category", "Date", "Note", "Amount"])


def display_record_list(store: RecordStore):
    """
    Render recorded expenses newest first.

    Each row gets Edit / Delete buttons. Below, list editing mode lets the
    user tick several rows and delete them at once by position.
    """
    st.subheader("Records")
    if not store.records:
        st.info("No records yet. Add an expense to start tracking your spending.")
        return

    for r in store.records:
        col_info, col_amount, col_edit, col_delete = st.columns([5, 2, 1, 1])
        with col_info:
            marker = " (editing)" if r.id == store.editing_id else ""
            st.markdown(f"**{r.category.label}**{marker}")
            st.caption(r.created_at.isoformat())
            if r.note:
                st.write(r.note)
        with col_amount:
            st.markdown(f"**{r.amount:.2f} {CURRENCY}**")
        with col_edit:
            st.button("Edit", key=f"edit_{r.id}", on_click=_on_begin_edit, args=(store, r.id))
        with col_delete:
            st.button("Delete", key=f"delete_{r.id}", on_click=_on_delete, args=(store, r.id))

    with st.expander("Select rows to delete"):
        for r in store.records:
            st.checkbox(
                f"{r.category.label} · {r.created_at.isoformat()} · {r.amount:.2f} {CURRENCY}",
                key=_select_key(r.id),
            )
        positions = selected_positions(store)
        if positions:
            st.dataframe(_records_frame([store.records[i] for i in positions]), hide_index=True)
        st.button(
            f"Delete selected ({len(positions)})",
            key="delete_selected",
            disabled=not positions,
            on_click=_on_delete_selected,
            args=(store,),
        )


def display_analysis_placeholder():
    st.info("Analysis page under development…")
