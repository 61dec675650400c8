"""
Shared fixtures for the test suite.

Everything runs against in-memory objects or a LocalConnector in a
temporary directory; no network access is needed.
"""
import pytest

from connectors.local_connector import LocalConnector
from services.models import Category, Product


def build_product(id, code, name="", price=0, category="Lampu", description="", image_url="",
                  updated_at="2024-01-01T00:00:00+00:00"):
    return Product(id=id, code=code, name=name or f"Product {code}", price=price, category=category,
                   description=description, image_url=image_url, updated_at=updated_at)


@pytest.fixture
def make_product():
    return build_product


@pytest.fixture
def categories():
    return [
        Category(id="c1", name="Lampu"),
        Category(id="c2", name="Interior"),
        Category(id="c3", name="Aksesoris Truk"),
    ]


@pytest.fixture
def products():
    return [
        build_product("p1", "LED-H4", "Lampu LED H4", 350000, "Lampu", "Super bright headlight",
                      updated_at="2024-03-01T10:00:00+00:00"),
        build_product("p2", "MAT-01", "Karpet Dasar", 150000, "Interior", "Rubber floor mat",
                      updated_at="2024-03-03T10:00:00+00:00"),
        build_product("p3", "FOG-02", "Fog Lamp Bulat", 275000, "Lampu", "Round fog lamp",
                      updated_at="2024-03-02T10:00:00+00:00"),
        build_product("p4", "TRK-10", "Spakbor Truk", 500000, "Aksesoris Truk", "Mud flap for trucks",
                      updated_at="2024-02-01T10:00:00+00:00"),
    ]


@pytest.fixture
def backend(tmp_path):
    """An empty local backend."""
    return LocalConnector(tmp_path / "catalog.json", seed=False)


@pytest.fixture
def seeded_backend(tmp_path):
    """A local backend with the demo data and the default admin/admin123 account."""
    return LocalConnector(tmp_path / "seeded" / "catalog.json")
