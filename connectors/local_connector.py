# catalog_dashboard/connectors/local_connector.py
import json
import logging
import os
from pathlib import Path

from connectors.base import BackendError, CatalogBackend
from services.auth_service import hash_password
from services.models import new_id, utc_now_iso

logger = logging.getLogger(__name__)

HISTORY_RETENTION = 100

SEED_CATEGORIES = [
    "Interior Mobil",
    "Eksterior & Body",
    "Lampu & Kelistrikan",
    "Aksesoris Truk",
    "Oli & Perawatan",
]

SEED_PRODUCT = {
    "code": "LED-H4-01",
    "name": "Lampu LED Headlight H4 Turbo",
    "price": 350000,
    "category": "Lampu & Kelistrikan",
    "description": (
        "Lampu utama LED H4 super terang, 6000K Pure White. Pemasangan PNP, cocok untuk "
        "Avanza, Innova, Xenia, dan truk engkel. Dilengkapi kipas pendingin high speed."
    ),
    "image_url": "",
}

DEFAULT_ADMIN = ("admin", "admin123")


class LocalConnector(CatalogBackend):
    """
    Keeps every table in one JSON file and stored images in a folder next to it.
    Used for demos and offline work; mirrors the unique constraints of the
    hosted tables.
    """

    def __init__(self, path, bucket="product-images", seed=True):
        self.path = Path(path)
        self.bucket = bucket
        self.images_dir = self.path.parent / bucket
        if not self.path.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write(self._seed_data() if seed else self._empty())
            logger.info(f"Created local catalog data file at {self.path}.")

    @staticmethod
    def _empty():
        return {"products": [], "categories": [], "admin_users": [], "history_logs": []}

    def _seed_data(self):
        data = self._empty()
        now = utc_now_iso()
        data["categories"] = [{"id": new_id(), "name": name} for name in SEED_CATEGORIES]
        data["products"] = [{"id": new_id(), **SEED_PRODUCT, "updated_at": now, "created_at": now}]
        username, password = DEFAULT_ADMIN
        data["admin_users"] = [{
            "id": new_id(),
            "username": username,
            "password_hash": hash_password(password),
            "email": None,
            "created_at": now,
        }]
        return data

    def _read(self):
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read local catalog data {self.path}: {e}")
            raise BackendError(f"Could not read local data file: {e}") from e
        for table, rows in self._empty().items():
            data.setdefault(table, rows)
        return data

    def _write(self, data):
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write local catalog data {self.path}: {e}")
            raise BackendError(f"Could not write local data file: {e}") from e

    @staticmethod
    def _find(rows, row_id):
        for i, row in enumerate(rows):
            if str(row.get("id")) == str(row_id):
                return i
        return None

    # --- products ---
    def list_products(self):
        rows = self._read()["products"]
        return sorted(rows, key=lambda r: r.get("updated_at") or "", reverse=True)

    def insert_product(self, record):
        data = self._read()
        if any(p["code"] == record.get("code") for p in data["products"]):
            raise BackendError(f"Product code '{record.get('code')}' already exists.", status_code=409)
        now = utc_now_iso()
        row = {"updated_at": now, **record, "id": record.get("id") or new_id(), "created_at": now}
        data["products"].append(row)
        self._write(data)
        logger.info(f"Inserted product {row['code']} into local data.")
        return row

    def update_product(self, product_id, record):
        data = self._read()
        index = self._find(data["products"], product_id)
        if index is None:
            raise BackendError(f"Product {product_id} not found.", status_code=404)
        code = record.get("code")
        if code and any(p["code"] == code and str(p["id"]) != str(product_id) for p in data["products"]):
            raise BackendError(f"Product code '{code}' already exists.", status_code=409)
        data["products"][index] = {**data["products"][index], **record, "id": data["products"][index]["id"]}
        self._write(data)
        return data["products"][index]

    def upsert_product_by_code(self, record):
        data = self._read()
        for index, row in enumerate(data["products"]):
            if row["code"] == record.get("code"):
                data["products"][index] = {**row, **record, "id": row["id"]}
                self._write(data)
                return data["products"][index]
        now = utc_now_iso()
        row = {"updated_at": now, **record, "id": record.get("id") or new_id(), "created_at": now}
        data["products"].append(row)
        self._write(data)
        return row

    def delete_product(self, product_id):
        data = self._read()
        index = self._find(data["products"], product_id)
        if index is None:
            raise BackendError(f"Product {product_id} not found.", status_code=404)
        del data["products"][index]
        self._write(data)

    # --- categories ---
    def list_categories(self):
        return sorted(self._read()["categories"], key=lambda r: r["name"].lower())

    def insert_categories(self, records):
        data = self._read()
        existing = {c["name"].strip().lower() for c in data["categories"]}
        created = []
        for record in records:
            name = record["name"].strip()
            if name.lower() in existing:
                raise BackendError(f"Category '{name}' already exists.", status_code=409)
            existing.add(name.lower())
            created.append({"id": record.get("id") or new_id(), "name": name})
        data["categories"].extend(created)
        self._write(data)
        return created

    def delete_category(self, category_id):
        data = self._read()
        index = self._find(data["categories"], category_id)
        if index is None:
            raise BackendError(f"Category {category_id} not found.", status_code=404)
        del data["categories"][index]
        self._write(data)

    # --- admin users ---
    def list_admins(self):
        rows = self._read()["admin_users"]
        public = [{k: v for k, v in row.items() if k != "password_hash"} for row in rows]
        return sorted(public, key=lambda r: r.get("created_at") or "", reverse=True)

    def get_admin_by_username(self, username):
        for row in self._read()["admin_users"]:
            if row["username"] == username:
                return row
        return None

    def insert_admin(self, record):
        data = self._read()
        if any(a["username"] == record["username"] for a in data["admin_users"]):
            raise BackendError(f"Username '{record['username']}' already exists.", status_code=409)
        row = {"created_at": utc_now_iso(), "email": None, **record, "id": record.get("id") or new_id()}
        data["admin_users"].append(row)
        self._write(data)
        return {k: v for k, v in row.items() if k != "password_hash"}

    def delete_admin(self, admin_id):
        data = self._read()
        index = self._find(data["admin_users"], admin_id)
        if index is None:
            raise BackendError(f"Admin {admin_id} not found.", status_code=404)
        del data["admin_users"][index]
        self._write(data)

    # --- activity log ---
    def list_history(self, limit=100):
        rows = sorted(self._read()["history_logs"], key=lambda r: r.get("timestamp") or "", reverse=True)
        return rows[:limit]

    def insert_history(self, record):
        data = self._read()
        row = {**record, "id": record.get("id") or new_id()}
        logs = sorted([row] + data["history_logs"], key=lambda r: r.get("timestamp") or "", reverse=True)
        data["history_logs"] = logs[:HISTORY_RETENTION]
        self._write(data)
        return row

    # --- object storage ---
    def _object_path(self, key):
        path = (self.images_dir / key).resolve()
        if self.images_dir.resolve() not in path.parents:
            raise BackendError(f"Invalid object key: {key}")
        return path

    def upload_object(self, key, data, content_type):
        path = self._object_path(key)
        if path.exists():
            raise BackendError(f"Object {key} already exists.", status_code=409)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Failed to store image {key}: {e}")
            raise BackendError(f"Could not store image: {e}") from e
        logger.info(f"Stored {len(data)} bytes at {path}.")

    def public_url(self, key):
        return str(self.images_dir / key)

    def delete_objects(self, keys):
        for key in keys:
            path = self._object_path(key)
            try:
                path.unlink()
            except FileNotFoundError:
                logger.warning(f"Image {key} was already gone.")
            except OSError as e:
                logger.error(f"Failed to delete image {key}: {e}")
                raise BackendError(f"Could not delete image: {e}") from e

    def list_objects(self):
        if not self.images_dir.exists():
            return []
        return sorted(p.name for p in self.images_dir.iterdir() if p.is_file())
