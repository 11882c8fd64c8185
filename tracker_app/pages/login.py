"""Login page: mock authentication gate shown until a user signs in."""

from __future__ import annotations

import streamlit as st

from tracker_app.app import LOGIN_PAGE, get_auth, register_page


@register_page(LOGIN_PAGE)
def login_page():
    st.title("Login")
    auth = get_auth()
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log In", type="primary", use_container_width=True)
    if not submitted:
        return
    if not (username and password):
        st.error("Username and password are required.")
        return
    if auth.login(username, password):
        st.rerun()
    else:
        st.error("Invalid username or password")
