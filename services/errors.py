# catalog_dashboard/services/errors.py


class CatalogError(Exception):
    """Base class for errors that are shown to the admin as-is."""


class ValidationError(CatalogError):
    pass


class DuplicateError(ValidationError):
    pass


class UploadError(CatalogError):
    pass


class CategoryInUseError(CatalogError):
    def __init__(self, category_name, product_count):
        self.category_name = category_name
        self.product_count = product_count
        super().__init__(
            f"Category '{category_name}' is still used by {product_count} product(s). "
            "Move those products to another category first."
        )


class AdminRuleError(CatalogError):
    pass


class AuthenticationError(CatalogError):
    pass
