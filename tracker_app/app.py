"""Application entry point: page registry, router, and per-session services."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import streamlit as st

from tracker_app.core.auth import AuthService, credentials_from_secrets
from tracker_app.core.backends import build_backing_store
from tracker_app.core.config import APP_TITLE, ISSUES_KEY, USERS_KEY, StorageSettings, load_storage_settings
from tracker_app.core.errors import StoreError
from tracker_app.core.store import IssueStore, UserStore
from tracker_app.features.controller import ViewController

logger = logging.getLogger(__name__)

PAGES = {}
LOGIN_PAGE = "Login"

T = TypeVar("T")


def register_page(label):
    def decorator(func):
        PAGES[label] = func
        return func

    return decorator


# ------------------ Session Services ------------------
def _secrets() -> Any:
    try:
        # Touch the mapping so a missing secrets file fails here, not later
        st.secrets.get("storage")
    except FileNotFoundError:
        logger.debug("No Streamlit secrets file; using environment/defaults")
        return {}
    return st.secrets


def get_auth() -> AuthService:
    if "auth" not in st.session_state:
        st.session_state["auth"] = AuthService(credentials_from_secrets(_secrets()))
    return st.session_state["auth"]


def get_storage_settings() -> StorageSettings:
    if "storage_settings" not in st.session_state:
        st.session_state["storage_settings"] = load_storage_settings(_secrets())
    return st.session_state["storage_settings"]


def set_storage_settings(settings: StorageSettings) -> None:
    """Switch backing stores for this session; views rebuild on next access."""
    for name in ("issue_view", "dashboard_view", "user_view"):
        controller = st.session_state.pop(name, None)
        if controller is not None:
            controller.unmount()
    st.session_state.pop("issue_store", None)
    st.session_state.pop("user_store", None)
    st.session_state["storage_settings"] = settings


def get_issue_store() -> IssueStore:
    if "issue_store" not in st.session_state:
        backend = build_backing_store(get_storage_settings(), ISSUES_KEY)
        st.session_state["issue_store"] = IssueStore(backend, author=lambda: get_auth().username)
    return st.session_state["issue_store"]


def get_user_store() -> UserStore:
    if "user_store" not in st.session_state:
        backend = build_backing_store(get_storage_settings(), USERS_KEY)
        st.session_state["user_store"] = UserStore(backend)
    return st.session_state["user_store"]


def activate_view(name: str) -> ViewController:
    """Mount the controller for the visible page and unmount every other one."""
    if name not in st.session_state:
        store = get_user_store() if name == "user_view" else get_issue_store()
        st.session_state[name] = ViewController(store)
    for other in ("issue_view", "dashboard_view", "user_view"):
        if other != name and other in st.session_state:
            st.session_state[other].unmount()
    controller: ViewController = st.session_state[name]
    controller.mount()
    return controller


def attempt_store_action(
    action: Callable[..., T], *args, success: str | None = None, **kwargs
) -> tuple[bool, T | None]:
    """Run a store call, turning failures into a visible error instead of a crash.

    Returns ``(ok, result)``. Callers must not ``st.rerun()`` when ``ok`` is
    False, or the error message is wiped before the user sees it.
    """
    try:
        result = action(*args, **kwargs)
    except (StoreError, ValueError) as exc:
        logger.error("Store action %s failed: %s", getattr(action, "__name__", action), exc)
        st.error(f"{exc}")
        return False, None
    if success:
        st.toast(success)
    return True, result


def run_store_action(action: Callable[..., T], *args, success: str | None = None, **kwargs) -> T | None:
    return attempt_store_action(action, *args, success=success, **kwargs)[1]


def poll_view(controller: ViewController) -> bool:
    """Polling tick for a mounted view; failures are shown, not raised."""
    try:
        return controller.tick()
    except StoreError as exc:
        logger.error("Refresh of %s failed: %s", controller.store.model.KIND.lower(), exc)
        st.error(f"Could not refresh: {exc}")
        return False


# ------------------ Router ------------------
def main():
    st.sidebar.title(APP_TITLE)
    auth = get_auth()
    if not auth.is_authenticated:
        if LOGIN_PAGE in PAGES:
            PAGES[LOGIN_PAGE]()
        else:
            st.error("Login page not registered.")
        return

    pages = [name for name in PAGES if name != LOGIN_PAGE]
    if not pages:
        st.write("No pages registered yet.")
        return
    preferred_order = [
        "Dashboard",  # summary cards and charts
        "Issue Management",  # issue table and edit dialog
        "User Management",  # user table
        "Setup / Connection",  # storage configuration
    ]
    ordered = [name for name in preferred_order if name in pages]
    trailing = sorted(name for name in pages if name not in preferred_order)
    pages = ordered + trailing

    page = st.sidebar.selectbox("Navigation", pages, index=0)
    st.sidebar.markdown("---")
    st.sidebar.caption(f"Logged in as: {auth.username}")
    users = st.session_state.get("user_store")
    if users is not None and users.loaded:
        st.sidebar.caption(f"Users: {len(users)}")
    if st.sidebar.button("Logout", use_container_width=True):
        auth.logout()
        st.rerun()
    PAGES[page]()


if __name__ == "__main__":
    main()
