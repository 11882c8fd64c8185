"""Convenience launcher for the Streamlit app.

Usage:
  streamlit run run_dashboard.py

Automatically imports every module in ``tracker_app/pages`` so each page
decorated with ``@register_page`` registers itself without manual edits here.
"""

import logging
from importlib import import_module
from pathlib import Path

import streamlit as st

from tracker_app.app import main
from tracker_app.core.config import APP_TITLE

logger = logging.getLogger(__name__)

st.set_page_config(page_title=APP_TITLE, layout="wide")

PAGES_DIR = Path(__file__).parent / "tracker_app" / "pages"
for py in sorted(PAGES_DIR.glob("[!_]*.py")):
    mod_name = f"tracker_app.pages.{py.stem}"
    try:
        import_module(mod_name)
    except ImportError:  # pragma: no cover
        logger.exception("Failed importing page %s", mod_name)

if __name__ == "__main__":
    main()
