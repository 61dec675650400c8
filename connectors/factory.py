# catalog_dashboard/connectors/factory.py
import logging

from connectors.local_connector import LocalConnector
from connectors.supabase_connector import SupabaseConnector

logger = logging.getLogger(__name__)


def create_backend(config):
    """Builds the backend selected by `backend.kind` in the app config."""
    kind = (config.get("backend", {}).get("kind") or "local").lower()

    if kind == "supabase":
        supabase_config = config.get("supabase", {})
        logger.info(f"Using Supabase backend at {supabase_config.get('url')}.")
        return SupabaseConnector(
            api_key=supabase_config.get("api_key"),
            base_url=supabase_config.get("url"),
            bucket=supabase_config.get("bucket", "product-images"),
            tables=supabase_config.get("tables"),
        )
    if kind == "local":
        local_config = config.get("local", {})
        path = local_config.get("path", "data/catalog.json")
        logger.info(f"Using local JSON backend at {path}.")
        return LocalConnector(path, bucket=local_config.get("bucket", "product-images"))

    raise ValueError(f"Unknown backend kind: {kind}")
