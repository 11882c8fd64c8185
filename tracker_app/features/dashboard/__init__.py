"""Dashboard feature module: summary cards, charts and team lead statistics."""

from tracker_app.features.dashboard.context import DashboardContext, build_dashboard_context

__all__ = [
    "DashboardContext",
    "build_dashboard_context",
]
