# app.py

import logging

import streamlit as st

from ui.state import ensure_state
from ui.sidebar import render_sidebar
from ui.pages.analysis_page import render_analysis_page

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(name)s - %(message)s")

st.set_page_config(
    page_title="COVID-19: аналіз смертності та захворюваності",
    layout="wide",
)

ensure_state()
render_sidebar()
render_analysis_page()
