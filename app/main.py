# app/main.py

import streamlit as st
from dotenv import load_dotenv
from app.ui.controller import UserViewController
from app.ui.users import users_page


load_dotenv()


st.set_page_config(page_title="User Management", layout="wide")

# Built once per browser session, then reused across reruns
if "controller" not in st.session_state:
    controller = UserViewController()
    controller.refresh()
    st.session_state["controller"] = controller

users_page(st.session_state["controller"])
