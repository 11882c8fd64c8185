"""Issue management page: add, filter, sort, edit, comment, delete, export."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping
from datetime import date
from typing import Any

import streamlit as st

from tracker_app.analytics.filters import ALL, FilterCriteria, option_values
from tracker_app.app import (
    activate_view,
    attempt_store_action,
    get_issue_store,
    poll_view,
    register_page,
    run_store_action,
)
from tracker_app.core.column_config import get_columns
from tracker_app.core.config import (
    ASSIGNED_TO_OPTIONS,
    CATEGORY_OPTIONS,
    POLL_INTERVAL_SECONDS,
    PRIORITY_OPTIONS,
    PROJECT_OPTIONS,
    REPORTED_BY_OPTIONS,
    SETTINGS,
    STATUS_OPTIONS,
    TEAM_LEADS,
)
from tracker_app.core.errors import StoreError
from tracker_app.core.export import export_csv, export_issues_xlsx, issues_export_frame
from tracker_app.core.models import IssueModel, today_iso
from tracker_app.core.store import IssueStore
from tracker_app.features.controller import ViewController
from tracker_app.visual.column_metadata import COLUMN_METADATA
from tracker_app.visual.tables import prepare_issue_table, sort_indicator

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (field, label, options) for the select-style fields of the dialogs
SELECT_FIELDS = (
    ("reported_by", "Reported By", REPORTED_BY_OPTIONS),
    ("status", "Status", STATUS_OPTIONS),
    ("priority", "Priority", PRIORITY_OPTIONS),
    ("assigned_to", "Assigned To", ASSIGNED_TO_OPTIONS),
    ("category", "Category", CATEGORY_OPTIONS),
    ("team_lead", "Team Lead", TEAM_LEADS),
    ("project", "Project", PROJECT_OPTIONS),
)
TEXT_FIELDS = (
    ("description", "Description"),
    ("example", "Example"),
    ("dev_note", "Notes"),
)


def _parse_iso(value: str) -> date | None:
    try:
        return date.fromisoformat(value[:10]) if value else None
    except ValueError:
        return None


def _with_current(options, current: str) -> list[str]:
    values = list(options)
    if current and current not in values:
        values.append(current)
    return values


def claim_upload(state: MutableMapping[str, Any], issue_id: int, file_id: str) -> bool:
    """Mark an uploaded file as handled; False when it was already attempted.

    The uploader keeps its file across reruns, so without this a failed
    attachment would be retried on every rerun.
    """
    key = f"handled_upload_{issue_id}"
    if state.get(key) == file_id:
        return False
    state[key] = file_id
    return True


# ------------------ Add Issue ------------------
def _render_new_issue_form(store: IssueStore) -> None:
    with st.expander("Add New Issue"), st.form("new_issue", clear_on_submit=True):
        values: dict[str, object] = {}
        for name, label in TEXT_FIELDS[:2]:
            values[name] = st.text_input(label)
        for name, label, options in SELECT_FIELDS:
            values[name] = st.selectbox(label, options, index=None, placeholder=label)
        values["date"] = st.date_input("Date", value=_parse_iso(today_iso()))
        values["resolution_date"] = st.date_input("Resolution Date", value=None)
        values["dev_note"] = st.text_input("Notes")
        if st.form_submit_button("Add Issue", type="primary"):
            draft = IssueModel.from_dict({k: v for k, v in values.items() if v is not None})
            created = run_store_action(store.create, draft)
            if created is not None:
                st.success(f"Issue {created.id} added.")


# ------------------ Filters & Sorting ------------------
def _render_filters(controller: ViewController) -> None:
    df = controller.frame()
    row1 = st.columns([3, 1, 1, 1])
    search = row1[0].text_input("Search issues...", key="issue_filter_search")
    status = row1[1].selectbox("Status", [ALL, "open", "in progress", "closed"], key="issue_filter_status")
    priority = row1[2].selectbox("Priority", [ALL, *PRIORITY_OPTIONS], key="issue_filter_priority")
    category = row1[3].selectbox(
        "Category", [ALL, *option_values(df, "category", CATEGORY_OPTIONS)], key="issue_filter_category"
    )
    row2 = st.columns(6)
    team_lead = row2[0].selectbox("Team Lead", [ALL, *option_values(df, "team_lead", TEAM_LEADS)])
    project = row2[1].selectbox("Project", [ALL, *option_values(df, "project", PROJECT_OPTIONS)])
    assigned_to = row2[2].selectbox("Assigned To", [ALL, *option_values(df, "assigned_to", ASSIGNED_TO_OPTIONS)])
    reported_by = row2[3].selectbox("Reported By", [ALL, *option_values(df, "reported_by", REPORTED_BY_OPTIONS)])
    from_date = row2[4].date_input("From", value=None, key="issue_filter_from")
    to_date = row2[5].date_input("To", value=None, key="issue_filter_to")
    controller.set_criteria(
        FilterCriteria(
            search=search,
            status=status,
            priority=priority,
            category=category,
            team_lead=team_lead,
            project=project,
            assigned_to=assigned_to,
            reported_by=reported_by,
            from_date=from_date.isoformat() if from_date else "",
            to_date=to_date.isoformat() if to_date else "",
        )
    )


def _render_sort_header(controller: ViewController) -> None:
    columns = get_columns("issues")
    state = controller.sort_state
    cells = st.columns(len(columns))
    for cell, column in zip(cells, columns, strict=True):
        label = COLUMN_METADATA.get(column, (column,))[0]
        if cell.button(label + sort_indicator(column, state.key, state.direction), key=f"issue_sort_{column}"):
            controller.click_sort(column)
            st.rerun()


# ------------------ Edit Dialog ------------------
def _save_field(store: IssueStore, issue_id: int, field: str, widget_key: str) -> None:
    value = st.session_state.get(widget_key)
    run_store_action(store.update, issue_id, field, value)


def _render_editor(store: IssueStore, issue: IssueModel) -> None:
    st.subheader(issue.description or f"Issue {issue.id}")
    left, right = st.columns(2)
    for idx, (name, label, options) in enumerate(SELECT_FIELDS):
        current = getattr(issue, name)
        choices = _with_current(options, current)
        key = f"edit_{issue.id}_{name}"
        (left if idx % 2 == 0 else right).selectbox(
            label,
            choices,
            index=choices.index(current) if current in choices else None,
            key=key,
            on_change=_save_field,
            args=(store, issue.id, name, key),
        )
    for name, label in TEXT_FIELDS:
        key = f"edit_{issue.id}_{name}"
        st.text_input(
            label, value=getattr(issue, name), key=key, on_change=_save_field, args=(store, issue.id, name, key)
        )
    dates = st.columns(2)
    for cell, (name, label) in zip(dates, (("date", "Date"), ("resolution_date", "Resolution Date")), strict=True):
        key = f"edit_{issue.id}_{name}"
        cell.date_input(
            label,
            value=_parse_iso(getattr(issue, name)),
            key=key,
            on_change=_save_field,
            args=(store, issue.id, name, key),
        )

    st.markdown("#### Attachments")
    for attachment in issue.attachments:
        st.write(f"- {attachment}")
    upload = st.file_uploader("Add attachment", key=f"attach_{issue.id}_{len(issue.attachments)}")
    if upload is not None and claim_upload(st.session_state, issue.id, upload.file_id):
        ok, _ = attempt_store_action(store.add_attachment, issue.id, upload.name, success=f"Attached {upload.name}")
        if ok:
            st.rerun()

    st.markdown("#### Comments")
    for comment in issue.comments:
        with st.container(border=True):
            st.markdown(f"**{comment.author}**")
            st.write(comment.content)
            st.caption(comment.created_at)
    with st.form(f"comment_{issue.id}", clear_on_submit=True):
        content = st.text_input("Add a comment...")
        if st.form_submit_button("Add Comment") and content.strip():
            ok, _ = attempt_store_action(store.add_comment, issue.id, content)
            if ok:
                st.rerun()

    if st.button("Delete", type="primary", key=f"delete_{issue.id}"):
        ok, _ = attempt_store_action(store.delete, issue.id, success=f"Issue {issue.id} deleted.")
        if ok:
            st.session_state.pop("selected_issue", None)
            st.rerun()


@st.fragment(run_every=POLL_INTERVAL_SECONDS)
def _live_issue_table(controller: ViewController) -> None:
    poll_view(controller)
    _render_sort_header(controller)
    store = controller.store
    view = controller.table_view()
    table, display_cols, cfg = prepare_issue_table(view, extra_columns=["comment_count"])
    if table.empty:
        st.info("No issues match the current filters.")
        return
    st.dataframe(table[display_cols].head(SETTINGS.max_table_rows), hide_index=True, column_config=cfg)
    st.caption(f"{len(table)} of {len(store)} issue(s)")
    visible = [store.get(int(i)) for i in view["id"]]
    st.download_button(
        "Download CSV",
        data=export_csv(issues_export_frame(visible)),
        file_name="issues.csv",
        mime="text/csv",
    )


@register_page("Issue Management")
def issues_page():
    st.title("All Issues")
    try:
        controller = activate_view("issue_view")
    except StoreError as exc:
        logger.error("Failed to load issues: %s", exc)
        st.error(f"Failed to load issues: {exc}")
        st.button("Retry")
        return
    store = get_issue_store()

    actions = st.columns([1, 1, 4])
    with actions[0]:
        if st.button("Reload"):
            run_store_action(store.load)
    with actions[1]:
        st.download_button(
            "Export to Excel",
            data=export_issues_xlsx(store.records),
            file_name=SETTINGS.export_file_name,
            mime=XLSX_MIME,
        )
    _render_new_issue_form(store)
    _render_filters(controller)

    _live_issue_table(controller)

    view = controller.table_view()
    ids = [int(i) for i in view["id"]] if not view.empty else []
    selected = st.selectbox(
        "Edit issue",
        ids,
        index=None,
        placeholder="Select an issue to edit",
        key="selected_issue",
        format_func=lambda i: f"#{i} {store.get(i).description[:60]}" if store.find(i) else f"#{i}",
    )
    if selected is not None and store.find(selected) is not None:
        _render_editor(store, store.get(selected))
