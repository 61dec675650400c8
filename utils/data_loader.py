# catalog_dashboard/utils/data_loader.py
import logging
import streamlit as st
from datetime import datetime

from connectors.base import BackendError
from connectors.factory import create_backend
from services.models import Category, Product
from utils.config_loader import APP_CONFIG

logger = logging.getLogger(__name__)


@st.cache_resource
def get_backend():
    """One backend client per server process."""
    if "error" in APP_CONFIG:
        return None
    try:
        return create_backend(APP_CONFIG)
    except ValueError as e:
        logger.error(f"Failed to create backend: {e}")
        return None


def fetch_catalog(backend):
    """Products (newest update first) and categories from the backend."""
    products = [Product.from_record(row) for row in backend.list_products()]
    categories = [Category.from_record(row) for row in backend.list_categories()]
    if not categories:
        default_name = APP_CONFIG.get("catalog", {}).get("default_category", "Uncategorized")
        logger.info("Category table is empty; using the default category.")
        categories = [Category(id="default", name=default_name)]
    return products, categories


@st.cache_data(ttl=600)  # Cache data for 10 minutes
def load_data():
    """
    Fetches products and categories from the configured backend.
    Returns (products, categories, timestamp); empty lists on failure.
    """
    if "error" in APP_CONFIG:
        st.error(f"Configuration Error: {APP_CONFIG['error']}")
        return [], [], None

    backend = get_backend()
    if backend is None:
        st.error("Backend configuration is incomplete. Check settings.yaml and your secrets.")
        return [], [], None

    try:
        products, categories = fetch_catalog(backend)
    except BackendError as e:
        st.error(f"Could not load the catalog: {e}")
        return [], [], None

    return products, categories, datetime.now()


def refresh_data():
    st.cache_data.clear()
