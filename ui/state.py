from __future__ import annotations

import streamlit as st


def ensure_state() -> None:
    if "source_kind" not in st.session_state:
        # "remote" або "upload"
        st.session_state["source_kind"] = "remote"

    if "source" not in st.session_state:
        st.session_state["source"] = None

    if "run_trigger" not in st.session_state:
        st.session_state["run_trigger"] = False

    if "last_output" not in st.session_state:
        # кеш останнього запуску, щоб rerun не перераховував конвеєр
        st.session_state["last_output"] = None

    if "selected_state" not in st.session_state:
        st.session_state["selected_state"] = None
