# catalog_dashboard/connectors/supabase_connector.py
import requests
import logging

from connectors.base import BackendError, CatalogBackend

logger = logging.getLogger(__name__)

DEFAULT_TABLES = {
    "products": "products",
    "categories": "categories",
    "admin_users": "admin_users",
    "history_logs": "history_logs",
}


class SupabaseConnector(CatalogBackend):
    """Talks to the Supabase REST (PostgREST) and Storage APIs."""

    page_size = 1000  # PostgREST default max-rows
    timeout = 30

    def __init__(self, api_key, base_url, bucket="product-images", tables=None):
        if not api_key:
            logger.error("Supabase API key is not provided.")
            raise ValueError("Supabase API key is required.")
        if not base_url:
            logger.error("Supabase URL is not provided.")
            raise ValueError("Supabase URL is required.")
        self.base_url = base_url.rstrip('/')
        self.bucket = bucket
        self.tables = {**DEFAULT_TABLES, **(tables or {})}
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    # --- HTTP helpers ---
    def _request(self, method, url, **kwargs):
        headers = {**self.headers, **kwargs.pop("headers", {})}
        try:
            response = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            response.raise_for_status()
            return response
        except requests.exceptions.RequestException as e:
            response = getattr(e, "response", None)
            body = response.text if response is not None else ""
            status = response.status_code if response is not None else None
            logger.error(f"Supabase {method} {url} failed: {e} - Response: {body}")
            raise BackendError(self._readable_error(body, e), status_code=status, details=body) from e

    @staticmethod
    def _readable_error(body, exc):
        # PostgREST errors look like {"code": "23505", "message": "...", "details": "..."}
        if '"23505"' in (body or ""):
            return "A record with the same unique value already exists."
        return f"Backend request failed: {exc}"

    def _table_url(self, table):
        return f"{self.base_url}/rest/v1/{self.tables[table]}"

    def _json(self, response):
        if not response.content:
            return []
        return response.json()

    def _get_all_rows(self, table, params=None):
        all_rows = []
        start = 0
        while True:
            end = start + self.page_size - 1
            response = self._request(
                "GET",
                self._table_url(table),
                params={"select": "*", **(params or {})},
                headers={"Range-Unit": "items", "Range": f"{start}-{end}"},
            )
            results = self._json(response)
            all_rows.extend(results)
            if len(results) < self.page_size:
                break
            start += self.page_size
        logger.info(f"Fetched {len(all_rows)} row(s) from Supabase table {self.tables[table]}.")
        return all_rows

    def _insert(self, table, rows, params=None, prefer="return=representation"):
        response = self._request(
            "POST",
            self._table_url(table),
            params=params,
            json=rows,
            headers={"Prefer": prefer},
        )
        created = self._json(response)
        logger.info(f"Successfully wrote {len(rows)} row(s) to table {self.tables[table]}.")
        return created

    def _single(self, rows):
        if isinstance(rows, list):
            return rows[0] if rows else {}
        return rows

    # --- products ---
    def list_products(self):
        return self._get_all_rows("products", {"order": "updated_at.desc"})

    def insert_product(self, record):
        return self._single(self._insert("products", [record]))

    def update_product(self, product_id, record):
        response = self._request(
            "PATCH",
            self._table_url("products"),
            params={"id": f"eq.{product_id}"},
            json=record,
            headers={"Prefer": "return=representation"},
        )
        rows = self._json(response)
        if not rows:
            raise BackendError(f"Product {product_id} not found.", status_code=404)
        logger.info(f"Successfully updated product {product_id}.")
        return rows[0]

    def upsert_product_by_code(self, record):
        return self._single(self._insert(
            "products",
            [record],
            params={"on_conflict": "code"},
            prefer="resolution=merge-duplicates,return=representation",
        ))

    def delete_product(self, product_id):
        self._request("DELETE", self._table_url("products"), params={"id": f"eq.{product_id}"})
        logger.info(f"Successfully deleted product {product_id}.")

    # --- categories ---
    def list_categories(self):
        return self._get_all_rows("categories", {"order": "name.asc"})

    def insert_categories(self, records):
        if not records:
            return []
        return self._insert("categories", list(records))

    def delete_category(self, category_id):
        self._request("DELETE", self._table_url("categories"), params={"id": f"eq.{category_id}"})
        logger.info(f"Successfully deleted category {category_id}.")

    # --- admin users ---
    def list_admins(self):
        return self._get_all_rows("admin_users", {
            "select": "id,username,email,created_at",
            "order": "created_at.desc",
        })

    def get_admin_by_username(self, username):
        response = self._request(
            "GET",
            self._table_url("admin_users"),
            params={"select": "*", "username": f"eq.{username}", "limit": 1},
        )
        rows = self._json(response)
        return rows[0] if rows else None

    def insert_admin(self, record):
        return self._single(self._insert("admin_users", [record]))

    def delete_admin(self, admin_id):
        self._request("DELETE", self._table_url("admin_users"), params={"id": f"eq.{admin_id}"})
        logger.info(f"Successfully deleted admin {admin_id}.")

    # --- activity log ---
    def list_history(self, limit=100):
        response = self._request(
            "GET",
            self._table_url("history_logs"),
            params={"select": "*", "order": "timestamp.desc", "limit": limit},
        )
        return self._json(response)

    def insert_history(self, record):
        return self._single(self._insert("history_logs", [record]))

    # --- object storage ---
    def upload_object(self, key, data, content_type):
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{key}"
        self._request(
            "POST",
            url,
            data=data,
            headers={"Content-Type": content_type, "cache-control": "3600", "x-upsert": "false"},
        )
        logger.info(f"Uploaded {len(data)} bytes to {self.bucket}/{key}.")

    def public_url(self, key):
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{key}"

    def delete_objects(self, keys):
        keys = list(keys)
        if not keys:
            logger.info(f"Bucket {self.bucket}: No objects provided for deletion.")
            return
        self._request("DELETE", f"{self.base_url}/storage/v1/object/{self.bucket}", json={"prefixes": keys})
        logger.info(f"Deleted {len(keys)} object(s) from bucket {self.bucket}.")

    def list_objects(self):
        names = []
        offset = 0
        while True:
            response = self._request(
                "POST",
                f"{self.base_url}/storage/v1/object/list/{self.bucket}",
                json={"prefix": "", "limit": self.page_size, "offset": offset},
            )
            results = self._json(response)
            # skip the placeholder objects the dashboard creates for folders
            names.extend(item["name"] for item in results if item.get("name") and not item["name"].startswith("."))
            if len(results) < self.page_size:
                break
            offset += self.page_size
        return names
