"""
dashboard.py - Streamlit UI entrypoint and orchestration

This module wires the UI components (src.ui.components) with the record store
(src.tracker). main() builds two tabs: bookkeeping (form, actions, record list)
and a placeholder analysis tab.

Design notes:
 - Keep the dashboard responsible only for UI orchestration and presentation.
 - All record rules live in src.tracker; components dispatch intents to it.
 - The store lives in st.session_state, so it is scoped to one browser session
   and discarded when the session ends.
"""

import streamlit as st
from src.tracker import RecordStore
from src.ui import components


STORE_KEY = "record_store"


def get_store() -> RecordStore:
    """Return the session's RecordStore, creating it on first access."""
    if STORE_KEY not in st.session_state:
        st.session_state[STORE_KEY] = RecordStore()
    return st.session_state[STORE_KEY]


def main():
    st.title("Bookkeeping")
    store = get_store()
    components.init_form_state(store)

    bookkeeping_tab, analysis_tab = st.tabs(["Bookkeeping", "Analysis"])
    with bookkeeping_tab:
        components.display_record_form(store)
        components.display_action_buttons(store)
        components.display_record_list(store)
    with analysis_tab:
        components.display_analysis_placeholder()


if __name__ == "__main__":
    main()
