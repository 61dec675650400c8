# catalog_dashboard/utils/config_loader.py
import yaml
import os
import copy
import logging
import streamlit as st


logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')

SETTINGS_FILE = os.environ.get("CATALOG_SETTINGS_FILE", "settings.yaml")

DEFAULTS = {
    "backend": {"kind": "local"},
    "supabase": {
        "url": None,
        "api_key": None,
        "bucket": "product-images",
        "tables": {
            "products": "products",
            "categories": "categories",
            "admin_users": "admin_users",
            "history_logs": "history_logs",
        },
    },
    "local": {"path": "data/catalog.json", "bucket": "product-images"},
    "catalog": {
        "page_size": 20,
        "history_limit": 100,
        "max_image_mb": 5,
        "default_category": "Uncategorized",
    },
    "branding": {
        "name": "AUTOGEAR ACCESSORIES",
        "tagline": "Car & truck accessories catalog",
        "footer": "Sumber Jaya - Digital Accessories Catalog",
    },
}


def _merge(base, override):
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def get_supabase_secrets(environ=None):
    """Supabase credentials from st.secrets, falling back to environment variables."""
    environ = os.environ if environ is None else environ
    try:
        # Inside the Streamlit app
        secrets = dict(st.secrets["supabase"])
        logging.info("Loaded Supabase credentials from st.secrets.")
        return {k: v for k, v in secrets.items() if k in ("url", "api_key") and v}
    except Exception:
        # Standalone scripts and tests
        logging.info("st.secrets not available. Falling back to environment variables.")

    secrets = {}
    if environ.get("SUPABASE_URL"):
        secrets["url"] = environ["SUPABASE_URL"]
    if environ.get("SUPABASE_KEY"):
        secrets["api_key"] = environ["SUPABASE_KEY"]
    return secrets


def read_config(path=SETTINGS_FILE, environ=None, secrets=None):
    """Loads settings.yaml over the defaults, then applies secrets and environment overrides."""
    environ = os.environ if environ is None else environ
    try:
        with open(path, 'r') as f:
            loaded = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {"error": f"{path} not found."}
    except yaml.YAMLError as e:
        logging.error(f"Failed to parse {path}: {e}")
        return {"error": f"{path} is not valid YAML: {e}"}

    config = _merge(DEFAULTS, loaded)

    secrets = get_supabase_secrets(environ) if secrets is None else secrets
    config['supabase'].update(secrets)

    backend_env = environ.get('CATALOG_BACKEND')
    if backend_env:
        config['backend']['kind'] = backend_env
        logging.info(f"Backend kind set to '{backend_env}' from environment variable.")

    kind = str(config['backend'].get('kind', '')).lower()
    if kind not in ("supabase", "local"):
        return {"error": f"Unknown backend kind '{kind}' in {path}."}
    if kind == "supabase" and not all([config['supabase'].get('url'), config['supabase'].get('api_key')]):
        return {"error": "Supabase configuration is incomplete. Set SUPABASE_URL and SUPABASE_KEY."}

    catalog = config['catalog']
    try:
        catalog['page_size'] = max(1, int(catalog['page_size']))
        catalog['history_limit'] = max(1, int(catalog['history_limit']))
        catalog['max_image_mb'] = float(catalog['max_image_mb'])
    except (TypeError, ValueError) as e:
        return {"error": f"Invalid catalog settings in {path}: {e}"}

    return config


@st.cache_data(show_spinner=False)
def load_app_config():
    """Cached app configuration used by every page."""
    return read_config(SETTINGS_FILE)


APP_CONFIG = load_app_config()
