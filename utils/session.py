# catalog_dashboard/utils/session.py
import logging
import streamlit as st

from services.admin_service import AdminService
from services.auth_service import authenticate
from utils.config_loader import APP_CONFIG
from utils.data_loader import get_backend, load_data, refresh_data
from utils.state import STATE_KEY, DataLoaded, init_state, reduce

logger = logging.getLogger(__name__)

USER_KEY = "admin_username"


def current_username():
    return st.session_state.get(USER_KEY, "")


def is_logged_in():
    return bool(current_username())


def login(username, password):
    """Raises AuthenticationError on bad credentials."""
    admin = authenticate(get_backend(), username, password)
    st.session_state[USER_KEY] = admin.username
    return admin


def logout():
    logger.info(f"Admin '{current_username()}' logged out.")
    for key in (USER_KEY, STATE_KEY, "editing_product_id", "confirming_delete"):
        st.session_state.pop(key, None)


def require_admin():
    if not is_logged_in():
        st.warning("Access denied. Please log in as admin on the Home page.")
        st.stop()


def admin_service():
    catalog = APP_CONFIG.get("catalog", {})
    return AdminService(
        get_backend(),
        current_username(),
        default_category=catalog.get("default_category", "Uncategorized"),
        max_image_bytes=int(catalog.get("max_image_mb", 5) * 1024 * 1024),
    )


# --- app state store ---
def get_state(force_refresh=False):
    if STATE_KEY not in st.session_state or force_refresh:
        if force_refresh:
            refresh_data()
        products, categories, _ = load_data()
        page_size = APP_CONFIG.get("catalog", {}).get("page_size", 20)
        state = st.session_state.get(STATE_KEY) or init_state(page_size=page_size)
        st.session_state[STATE_KEY] = reduce(state, DataLoaded(products, categories))
    return st.session_state[STATE_KEY]


def dispatch(action):
    st.session_state[STATE_KEY] = reduce(get_state(), action)
    return st.session_state[STATE_KEY]
