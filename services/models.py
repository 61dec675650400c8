# catalog_dashboard/services/models.py
import uuid
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum

DEFAULT_CATEGORY = "Uncategorized"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    return str(uuid.uuid4())


def parse_timestamp(value) -> datetime:
    """
    Parses an ISO-8601 timestamp coming from the backend.
    Naive values are treated as UTC; anything unparsable sorts as the epoch.
    """
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value or "").strip()
        if not text:
            return EPOCH
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_rupiah(amount) -> str:
    """350000 -> 'Rp 350.000' (Indonesian thousands separator)."""
    return "Rp " + f"{int(amount or 0):,}".replace(",", ".")


@dataclass
class Product:
    id: str
    code: str
    name: str
    price: int = 0
    category: str = DEFAULT_CATEGORY
    description: str = ""
    image_url: str = ""
    updated_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_record(cls, record: dict) -> "Product":
        try:
            price = int(float(record.get("price") or 0))
        except (TypeError, ValueError):
            price = 0
        return cls(
            id=str(record.get("id", "")),
            code=record.get("code") or "",
            name=record.get("name") or "",
            price=price,
            category=record.get("category") or DEFAULT_CATEGORY,
            description=record.get("description") or "",
            image_url=record.get("image_url") or "",
            updated_at=record.get("updated_at") or record.get("created_at") or utc_now_iso(),
        )

    def to_record(self, include_id=True) -> dict:
        record = asdict(self)
        if not include_id:
            record.pop("id")
        return record


@dataclass
class Category:
    id: str
    name: str

    @classmethod
    def from_record(cls, record: dict) -> "Category":
        return cls(id=str(record.get("id", "")), name=(record.get("name") or "").strip())


@dataclass
class AdminUser:
    id: str
    username: str
    password_hash: str = ""
    email: str | None = None
    created_at: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_record(cls, record: dict) -> "AdminUser":
        return cls(
            id=str(record.get("id", "")),
            username=record.get("username") or "",
            password_hash=record.get("password_hash") or "",
            email=record.get("email") or None,
            created_at=record.get("created_at") or utc_now_iso(),
        )


class HistoryAction(str, Enum):
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    ADD_CATEGORY = "add-category"
    DELETE_CATEGORY = "delete-category"
    IMPORT = "import"

    @classmethod
    def parse(cls, value) -> "HistoryAction":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        # Rows written by the previous (Indonesian) admin panel
        legacy = {
            "TAMBAH": cls.ADD,
            "EDIT": cls.EDIT,
            "HAPUS": cls.DELETE,
            "TAMBAH_KATEGORI": cls.ADD_CATEGORY,
            "HAPUS_KATEGORI": cls.DELETE_CATEGORY,
            "IMPORT_EXCEL": cls.IMPORT,
        }
        if text.upper() in legacy:
            return legacy[text.upper()]
        return cls(text.lower())


@dataclass
class HistoryLogEntry:
    id: str
    username: str
    action: HistoryAction
    target_name: str
    target_code: str
    timestamp: str = field(default_factory=utc_now_iso)

    @classmethod
    def from_record(cls, record: dict) -> "HistoryLogEntry":
        return cls(
            id=str(record.get("id", "")),
            username=record.get("username") or "",
            action=HistoryAction.parse(record.get("action")),
            target_name=record.get("product_name") or "",
            target_code=record.get("product_code") or "",
            timestamp=record.get("timestamp") or utc_now_iso(),
        )

    def to_record(self, include_id=True) -> dict:
        record = {
            "username": self.username,
            "action": self.action.value,
            "product_name": self.target_name,
            "product_code": self.target_code,
            "timestamp": self.timestamp,
        }
        if include_id:
            record["id"] = self.id
        return record
