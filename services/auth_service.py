# catalog_dashboard/services/auth_service.py
import logging

from werkzeug.security import generate_password_hash, check_password_hash

from services.errors import AdminRuleError, AuthenticationError, DuplicateError, ValidationError
from services.models import AdminUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password_hash: str, password: str) -> bool:
    if not password_hash:
        return False
    try:
        return check_password_hash(password_hash, password)
    except ValueError:
        # not a werkzeug hash, e.g. a plaintext value left by the old panel
        logger.warning("Stored password is not a salted hash; refusing login.")
        return False


def authenticate(backend, username, password) -> AdminUser:
    """Returns the admin on success, raises AuthenticationError otherwise."""
    username = (username or "").strip()
    if not username or not password:
        raise AuthenticationError("Username and password are required.")

    record = backend.get_admin_by_username(username)
    if not record or not verify_password(record.get("password_hash", ""), password):
        logger.info(f"Failed login attempt for '{username}'.")
        raise AuthenticationError("Invalid username or password.")

    logger.info(f"Admin '{username}' logged in.")
    return AdminUser.from_record(record)


def validate_new_admin(username, password, admins):
    username = (username or "").strip()
    if not username or not (password or "").strip():
        raise ValidationError("Username and password are required.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if any(a.username == username for a in admins):
        raise DuplicateError(f"Username '{username}' is already taken.")
    return username


def check_can_delete_admin(target, admins, current_username):
    if target.username == current_username:
        raise AdminRuleError("You cannot delete your own account.")
    if not any(a.id == target.id for a in admins):
        raise AdminRuleError(f"Admin '{target.username}' no longer exists.")
    if len(admins) <= 1:
        raise AdminRuleError("At least one admin account must remain.")
