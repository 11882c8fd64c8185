"""Connection setup page: choose the backing store for this session."""

from __future__ import annotations

from pathlib import Path

import streamlit as st

from tracker_app.app import get_issue_store, get_storage_settings, register_page, run_store_action, set_storage_settings
from tracker_app.core.config import BACKEND_LOCAL, BACKEND_REMOTE, BACKENDS, StorageSettings


@register_page("Setup / Connection")
def setup_page():
    st.title("Storage Setup")
    st.caption("Issues and users are kept in a local snapshot or a remote REST API.")
    current = get_storage_settings()

    backend = st.radio(
        "Backing store",
        BACKENDS,
        index=BACKENDS.index(current.backend),
        format_func=lambda b: "Local snapshot" if b == BACKEND_LOCAL else "Remote API",
        horizontal=True,
    )
    data_dir = st.text_input("Data directory", value=str(current.data_dir), disabled=backend != BACKEND_LOCAL)
    api_url = st.text_input("API base URL", value=current.api_url, disabled=backend != BACKEND_REMOTE)
    token = st.text_input(
        "API token",
        type="password",
        value=current.api_token or "",
        disabled=backend != BACKEND_REMOTE,
    )
    timeout = st.number_input("Request timeout (seconds)", min_value=1.0, max_value=120.0, value=current.timeout)

    if st.button("Apply", type="primary"):
        if backend == BACKEND_REMOTE and not api_url:
            st.error("API base URL is required for the remote backend.")
            return
        set_storage_settings(
            StorageSettings(
                backend=backend,
                data_dir=Path(data_dir).expanduser(),
                api_url=api_url.rstrip("/"),
                api_token=token or None,
                timeout=float(timeout),
            )
        )
        store = get_issue_store()
        if run_store_action(store.load) is not None:
            st.success(f"Connected: {len(store)} issue(s) available.")

    if st.button("Reload data"):
        store = get_issue_store()
        if run_store_action(store.load) is not None:
            st.info(f"Reloaded {len(store)} issue(s).")
