# catalog_dashboard/services/admin_service.py
"""
Mutating admin actions. Each one validates locally, writes to the backend
and appends a history entry; the caller refreshes its state afterwards.
"""
import logging

from connectors.base import BackendError
from services import history_service
from services.auth_service import check_can_delete_admin, hash_password, validate_new_admin
from services.errors import CategoryInUseError, DuplicateError, ValidationError
from services.import_service import CREATED, ERROR, UPDATED, ImportSummary, coerce_price, reconcile
from services.models import AdminUser, Category, HistoryAction, Product, DEFAULT_CATEGORY, utc_now_iso
from services.storage_service import MAX_IMAGE_BYTES, delete_product_image, upload_product_image

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, backend, username, default_category=DEFAULT_CATEGORY, max_image_bytes=MAX_IMAGE_BYTES):
        self.backend = backend
        self.username = username
        self.default_category = default_category
        self.max_image_bytes = max_image_bytes

    def _log(self, action, target_name, target_code):
        # the main write already went through; a lost log line must not undo it
        try:
            history_service.record(self.backend, self.username, action, target_name, target_code)
        except BackendError as e:
            logger.error(f"Failed to write history entry ({action}, {target_code}): {e}")

    # --- products ---
    def validate_product_form(self, form, products, existing=None) -> dict:
        code = str(form.get("code") or "").strip()
        name = str(form.get("name") or "").strip()
        if not code or not name or form.get("price") in (None, ""):
            raise ValidationError("Name, code and price are required.")
        try:
            price = coerce_price(form.get("price"))
        except ValueError as e:
            raise ValidationError(str(e)) from e

        for product in products:
            if product.code == code and (existing is None or product.id != existing.id):
                raise DuplicateError(f"Product code '{code}' is already used by '{product.name}'.")

        return {
            "code": code,
            "name": name,
            "price": price,
            "category": str(form.get("category") or "").strip() or self.default_category,
            "description": str(form.get("description") or "").strip(),
            "image_url": str(form.get("image_url") or "").strip(),
            "updated_at": utc_now_iso(),
        }

    def save_product(self, form, products, existing=None) -> Product:
        record = self.validate_product_form(form, products, existing)
        if existing is not None:
            saved = self.backend.update_product(existing.id, record)
            product = Product.from_record({**existing.to_record(), **record, **(saved or {})})
            self._log(HistoryAction.EDIT, product.name, product.code)
        else:
            saved = self.backend.insert_product(record)
            product = Product.from_record({**record, **(saved or {})})
            self._log(HistoryAction.ADD, product.name, product.code)
        return product

    def delete_product(self, product, delete_image=True):
        self.backend.delete_product(product.id)
        if delete_image and product.image_url:
            delete_product_image(self.backend, product.image_url)
        self._log(HistoryAction.DELETE, product.name, product.code)

    def upload_image(self, data, filename, content_type) -> str:
        return upload_product_image(self.backend, data, filename, content_type, self.max_image_bytes)

    # --- categories ---
    def add_category(self, name, categories) -> Category:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Category name is required.")
        if any(c.name.strip().lower() == name.lower() for c in categories):
            raise DuplicateError(f"Category '{name}' already exists.")
        created = self.backend.insert_categories([{"name": name}])
        category = Category.from_record(created[0] if created else {"name": name})
        self._log(HistoryAction.ADD_CATEGORY, name, history_service.CATEGORY_MARKER)
        return category

    def delete_category(self, category, products):
        in_use = [p for p in products if p.category == category.name]
        if in_use:
            raise CategoryInUseError(category.name, len(in_use))
        self.backend.delete_category(category.id)
        self._log(HistoryAction.DELETE_CATEGORY, category.name, history_service.CATEGORY_MARKER)

    # --- import ---
    def import_rows(self, rows, products, categories):
        """
        Reconciles the rows in memory, then writes new categories and every
        touched product. Rows are independent: a failed write marks that
        row as an error and the import carries on.
        """
        result = reconcile(rows, products, categories)

        if result.new_categories:
            try:
                self.backend.insert_categories([{"name": c.name} for c in result.new_categories])
            except BackendError as e:
                logger.error(f"Failed to add imported categories: {e}")
                unsaved = {c.id for c in result.new_categories}
                result.warnings.append(
                    f"Categories {', '.join(c.name for c in result.new_categories)} were not created: {e}"
                )
                result.categories = [c for c in result.categories if c.id not in unsaved]
                result.new_categories = []

        final_by_id = {p.id: p for p in result.products}
        written = set()
        failed_ids = {}
        for row in result.rows:
            if row.status not in (CREATED, UPDATED) or row.product_id in written or row.product_id in failed_ids:
                continue
            product = final_by_id[row.product_id]
            try:
                self.backend.upsert_product_by_code(product.to_record(include_id=False))
                written.add(product.id)
            except BackendError as e:
                logger.warning(f"Import row {row.line} ({product.code}) was not saved: {e}")
                failed_ids[product.id] = str(e)

        for row in result.rows:
            if row.product_id in failed_ids:
                row.status, row.message = ERROR, failed_ids[row.product_id]

        result.summary = ImportSummary(
            new_products=sum(1 for r in result.rows if r.status == CREATED),
            updated_products=sum(1 for r in result.rows if r.status == UPDATED),
            new_categories=len(result.new_categories),
        )
        self._log(
            HistoryAction.IMPORT,
            f"Imported {result.summary.total_products} products, {result.summary.new_categories} categories",
            history_service.IMPORT_MARKER,
        )
        return result

    # --- admin users ---
    def list_admins(self):
        return [AdminUser.from_record(r) for r in self.backend.list_admins()]

    def add_admin(self, username, password, email=None, admins=None) -> AdminUser:
        admins = self.list_admins() if admins is None else admins
        username = validate_new_admin(username, password, admins)
        created = self.backend.insert_admin({
            "username": username,
            "password_hash": hash_password(password),
            "email": (email or "").strip() or None,
        })
        logger.info(f"Admin '{username}' created by {self.username}.")
        return AdminUser.from_record(created or {"username": username})

    def delete_admin(self, target, admins=None):
        admins = self.list_admins() if admins is None else admins
        check_can_delete_admin(target, admins, self.username)
        self.backend.delete_admin(target.id)
        logger.info(f"Admin '{target.username}' deleted by {self.username}.")
