# catalog_dashboard/Home.py
import streamlit as st

from connectors.base import BackendError
from services.errors import AuthenticationError
from utils.config_loader import APP_CONFIG
from utils.session import current_username, is_logged_in, login, logout

st.set_page_config(
    page_title="Accessories Catalog",
    page_icon="🏠",
    layout="wide"
)

if "error" in APP_CONFIG:
    st.error(f"Configuration Error: {APP_CONFIG['error']}")
    st.stop()

branding = APP_CONFIG.get("branding", {})

st.title(f"Welcome to {branding.get('name', 'the Accessories Catalog')} 🚗")
st.caption(branding.get("tagline", ""))

st.markdown("---")

if is_logged_in():
    col1, col2 = st.columns([3, 1])
    with col1:
        st.success(f"Logged in as **{current_username()}**")
    with col2:
        if st.button("🚪 Log out", use_container_width=True):
            logout()
            st.rerun()

    st.info("👈 **Select a page from the sidebar** to continue.")

    st.header("Available Modules")
    st.markdown("""
    - **📦 Catalog Viewer:** Browse, search and filter the product catalog, download product flyers or the full catalog as PDF, and share products on WhatsApp.
    - **🗂️ Admin Dashboard:** Manage products, categories and admin accounts, import or export Excel files, and review the activity history.
    """)
else:
    st.header("🔐 Admin Login")
    with st.form("login_form"):
        username = st.text_input("Username")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Log in", type="primary")

    if submitted:
        try:
            login(username, password)
            st.rerun()
        except AuthenticationError as e:
            st.error(str(e))
        except BackendError as e:
            st.error(f"A server error occurred. Please try again. ({e})")
