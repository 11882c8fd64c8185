"""User management page."""

from __future__ import annotations

import logging

import streamlit as st

from tracker_app.analytics.filters import FilterCriteria
from tracker_app.app import (
    activate_view,
    attempt_store_action,
    get_user_store,
    poll_view,
    register_page,
    run_store_action,
)
from tracker_app.core.column_config import get_columns
from tracker_app.core.config import POLL_INTERVAL_SECONDS
from tracker_app.core.errors import StoreError
from tracker_app.core.models import UserModel
from tracker_app.core.store import UserStore
from tracker_app.features.controller import ViewController
from tracker_app.visual.column_metadata import COLUMN_METADATA
from tracker_app.visual.tables import prepare_user_table, sort_indicator

logger = logging.getLogger(__name__)

USER_FIELDS = (("name", "Name"), ("email", "Email"), ("role", "Role"))


def _render_new_user_form(store: UserStore) -> None:
    with st.expander("Add User"), st.form("new_user", clear_on_submit=True):
        values = {name: st.text_input(label) for name, label in USER_FIELDS}
        if st.form_submit_button("Add User", type="primary"):
            if not values["name"].strip():
                st.warning("Name is required.")
                return
            created = run_store_action(store.create, UserModel.from_dict(values))
            if created is not None:
                st.success(f"User {created.name} added.")


def _render_sort_header(controller: ViewController) -> None:
    columns = get_columns("users")
    state = controller.sort_state
    for cell, column in zip(st.columns(len(columns)), columns, strict=True):
        label = COLUMN_METADATA.get(column, (column,))[0]
        if cell.button(label + sort_indicator(column, state.key, state.direction), key=f"user_sort_{column}"):
            controller.click_sort(column)
            st.rerun()


def _save_field(store: UserStore, user_id: int, field: str, widget_key: str) -> None:
    run_store_action(store.update, user_id, field, st.session_state.get(widget_key))


def _render_editor(store: UserStore, user: UserModel) -> None:
    st.subheader(f"Edit {user.name or f'user {user.id}'}")
    for cell, (name, label) in zip(st.columns(len(USER_FIELDS)), USER_FIELDS, strict=True):
        key = f"user_edit_{user.id}_{name}"
        cell.text_input(label, value=getattr(user, name), key=key, on_change=_save_field, args=(store, user.id, name, key))
    if st.button("Delete User", type="primary", key=f"user_delete_{user.id}"):
        ok, _ = attempt_store_action(store.delete, user.id, success=f"User {user.name} deleted.")
        if ok:
            st.session_state.pop("selected_user", None)
            st.rerun()


@st.fragment(run_every=POLL_INTERVAL_SECONDS)
def _live_user_table(controller: ViewController) -> None:
    poll_view(controller)
    _render_sort_header(controller)
    table, display_cols, cfg = prepare_user_table(controller.table_view())
    if table.empty:
        st.info("No users found.")
    else:
        st.dataframe(table[display_cols], hide_index=True, column_config=cfg)
        st.caption(f"{len(table)} of {len(controller.store)} user(s)")


@register_page("User Management")
def users_page():
    st.title("User Management")
    try:
        controller = activate_view("user_view")
    except StoreError as exc:
        logger.error("Failed to load users: %s", exc)
        st.error(f"Failed to load users: {exc}")
        st.button("Retry")
        return
    store = get_user_store()
    if len(store) == 0:
        run_store_action(store.seed_defaults)

    _render_new_user_form(store)
    search = st.text_input("Search users...", key="user_filter_search")
    controller.set_criteria(FilterCriteria(search=search))

    _live_user_table(controller)

    view = controller.table_view()
    ids = [int(i) for i in view["id"]] if not view.empty else []
    selected = st.selectbox(
        "Edit user",
        ids,
        index=None,
        placeholder="Select a user to edit",
        key="selected_user",
        format_func=lambda i: f"#{i} {store.get(i).name}" if store.find(i) else f"#{i}",
    )
    if selected is not None and store.find(selected) is not None:
        _render_editor(store, store.get(selected))
