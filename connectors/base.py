# catalog_dashboard/connectors/base.py


class BackendError(Exception):
    """Raised when the data backend rejects or fails a request."""

    def __init__(self, message, status_code=None, details=None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class CatalogBackend:
    """
    Data source used by the dashboard. Records are plain dicts using the
    backend column names (image_url, updated_at, product_name, ...).

    Implementations: SupabaseConnector (remote) and LocalConnector (JSON file).
    """
    bucket = "product-images"

    # --- products ---
    def list_products(self):
        raise NotImplementedError

    def insert_product(self, record):
        raise NotImplementedError

    def update_product(self, product_id, record):
        raise NotImplementedError

    def upsert_product_by_code(self, record):
        raise NotImplementedError

    def delete_product(self, product_id):
        raise NotImplementedError

    # --- categories ---
    def list_categories(self):
        raise NotImplementedError

    def insert_categories(self, records):
        raise NotImplementedError

    def delete_category(self, category_id):
        raise NotImplementedError

    # --- admin users ---
    def list_admins(self):
        raise NotImplementedError

    def get_admin_by_username(self, username):
        raise NotImplementedError

    def insert_admin(self, record):
        raise NotImplementedError

    def delete_admin(self, admin_id):
        raise NotImplementedError

    # --- activity log ---
    def list_history(self, limit=100):
        raise NotImplementedError

    def insert_history(self, record):
        raise NotImplementedError

    # --- object storage ---
    def upload_object(self, key, data, content_type):
        raise NotImplementedError

    def public_url(self, key):
        raise NotImplementedError

    def delete_objects(self, keys):
        raise NotImplementedError

    def list_objects(self):
        raise NotImplementedError
