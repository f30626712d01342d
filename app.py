"""
app.py - minimal entrypoint for Streamlit app

Keep this file tiny so streamlit can import it without side-effects.
Run the app with:
    streamlit run app.py

This module simply delegates to src.ui.dashboard.main().

"""
import os
try:
    # If running on Streamlit Cloud, transfer secrets to env vars so the tracker can read them
    import streamlit as _st
    try:
        _secrets = dict(_st.secrets)
    except Exception:
        _secrets = {}
    for _k in ("RECORD_LOOKBACK_DAYS", "RECORD_CURRENCY", "TRACKER_LOG_LEVEL"):
        if _k in _secrets and _secrets[_k] and _k not in os.environ:
            os.environ[_k] = str(_secrets[_k])
except ImportError:
    # keep import-time side-effects minimal if streamlit isn't available
    pass

from src.ui import dashboard


def main():
    dashboard.main()


if __name__ == "__main__":
    main()
