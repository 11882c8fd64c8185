"""View controller: store + filter + sort + aggregate for one mounted view.

The controller subscribes to its store while mounted and re-derives lazily:
each change notification bumps ``revision`` and drops the cached frame, and
the next call to :meth:`ViewController.table_view` or
:meth:`ViewController.dashboard` rebuilds it from the store.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

import pandas as pd

from tracker_app.analytics.filters import FilterCriteria, filter_issues, filter_users
from tracker_app.analytics.sorting import SortState, next_sort_state, sort_records
from tracker_app.core.mappers import issues_to_dataframe, users_to_dataframe
from tracker_app.core.models import IssueModel
from tracker_app.core.store import RecordStore
from tracker_app.features.dashboard import DashboardContext, build_dashboard_context

logger = logging.getLogger(__name__)


class ViewController:
    def __init__(
        self,
        store: RecordStore,
        *,
        criteria: FilterCriteria | None = None,
        sort_state: SortState | None = None,
    ):
        self.store = store
        self.criteria = criteria or FilterCriteria()
        self.sort_state = sort_state or SortState()
        self.revision = 0
        self._unsubscribe: Callable[[], None] | None = None
        self._frame: pd.DataFrame | None = None

    @property
    def is_issue_view(self) -> bool:
        return self.store.model is IssueModel

    @property
    def mounted(self) -> bool:
        return self._unsubscribe is not None

    # ------------------ Lifecycle ------------------
    def mount(self) -> None:
        """Subscribe to the store and load it on first use.

        Load failures propagate to the caller (the page shows them); the
        controller stays subscribed and the next mount retries the load.
        """
        if not self.mounted:
            self._unsubscribe = self.store.subscribe(self._on_change)
        if not self.store.loaded:
            self.store.load()

    def unmount(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._frame = None

    def _on_change(self) -> None:
        if not self.mounted:
            logger.warning("Change notification after unmount ignored")
            return
        self.revision += 1
        self._frame = None

    def tick(self) -> bool:
        """Polling fallback: reload when the backing store changed elsewhere."""
        if not self.mounted:
            return False
        return self.store.sync()

    # ------------------ View State ------------------
    def set_criteria(self, criteria: FilterCriteria | Mapping[str, Any]) -> None:
        if not isinstance(criteria, FilterCriteria):
            criteria = FilterCriteria.from_dict(criteria)
        self.criteria = criteria

    def click_sort(self, key: str) -> SortState:
        self.sort_state = next_sort_state(self.sort_state, key)
        return self.sort_state

    # ------------------ Derived Views ------------------
    def frame(self) -> pd.DataFrame:
        if self._frame is None:
            build = issues_to_dataframe if self.is_issue_view else users_to_dataframe
            self._frame = build(self.store.records)
        return self._frame

    def table_view(self) -> pd.DataFrame:
        df = self.frame()
        if self.is_issue_view:
            filtered = filter_issues(df, self.criteria)
        else:
            filtered = filter_users(df, self.criteria.search)
        return sort_records(filtered, self.sort_state.key, self.sort_state.direction)

    def dashboard(self) -> DashboardContext:
        return build_dashboard_context(self.frame())
