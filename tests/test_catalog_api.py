"""
Component tests for the public catalog, the homepage and admin catalog
management.
"""
import uuid
from datetime import datetime, timedelta, timezone

import pytest

from app.models.product import Category
from tests.conftest import API, auth_headers

LONG_AGO = datetime.now(timezone.utc) - timedelta(days=365)


def days_ago(n: int) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=n)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def women(session):
    cat = Category(name="Women", slug="women")
    session.add(cat)
    session.commit()
    session.refresh(cat)
    return cat


class TestListProducts:
    def test_newest_first_with_pagination(self, client, make_product):
        for i in range(5):
            make_product(f"Tee {i}", 100 + i, created_at=days_ago(100 - i))

        response = client.get(f"{API}/products", params={"page": 2, "per_page": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Products retrieved successfully"
        assert [p["name"] for p in body["data"]["products"]] == ["Tee 2", "Tee 1"]
        assert body["data"]["pagination"] == {
            "current_page": 2,
            "last_page": 3,
            "per_page": 2,
            "total": 5,
            "from": 3,
            "to": 4,
        }

    def test_inactive_products_are_hidden(self, client, make_product):
        make_product("Visible", 100)
        make_product("Hidden", 100, is_active=False)

        products = client.get(f"{API}/products").json()["data"]["products"]

        assert [p["name"] for p in products] == ["Visible"]

    def test_filter_by_category_slug(self, client, make_product, category, women):
        make_product("Shirt", 100, category_id=category.id)
        make_product("Dress", 200, category_id=women.id)

        products = client.get(
            f"{API}/products", params={"category": "women"}
        ).json()["data"]["products"]

        assert [p["name"] for p in products] == ["Dress"]
        assert products[0]["category"] == {
            "id": str(women.id),
            "name": "Women",
            "slug": "women",
        }

    def test_featured_flag_keeps_featured_or_recent(self, client, make_product):
        make_product("Old Plain", 100, created_at=LONG_AGO)
        make_product("Old Featured", 100, is_featured=True, created_at=LONG_AGO)
        make_product("Brand New", 100)

        products = client.get(
            f"{API}/products", params={"featured": "true"}
        ).json()["data"]["products"]

        assert sorted(p["name"] for p in products) == ["Brand New", "Old Featured"]

    def test_empty_page_has_null_bounds(self, client):
        pagination = client.get(f"{API}/products").json()["data"]["pagination"]

        assert pagination["total"] == 0
        assert pagination["last_page"] == 1
        assert pagination["from"] is None
        assert pagination["to"] is None


class TestSearch:
    def test_matches_name_and_description(self, client, make_product):
        make_product("Denim Jacket", 3000)
        make_product("Hoodie", 1500, description="Soft denim-look fleece")
        make_product("Cap", 300)

        products = client.get(
            f"{API}/products/search", params={"q": "denim"}
        ).json()["data"]["products"]

        assert [p["name"] for p in products] == ["Denim Jacket", "Hoodie"]

    def test_price_range(self, client, make_product):
        make_product("Cheap", 100)
        make_product("Mid", 500)
        make_product("Pricey", 5000)

        products = client.get(
            f"{API}/products/search", params={"min_price": 200, "max_price": 1000}
        ).json()["data"]["products"]

        assert [p["name"] for p in products] == ["Mid"]

    def test_inverted_price_range_is_rejected(self, client):
        response = client.get(
            f"{API}/products/search", params={"min_price": 500, "max_price": 100}
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"


class TestProductDetail:
    def test_by_id_and_by_slug(self, client, make_product, category):
        shirt = make_product(
            "Oxford Shirt", 2499.5, stock=0, slug="oxford-shirt", category_id=category.id
        )

        by_id = client.get(f"{API}/products/{shirt.id}").json()["data"]
        by_slug = client.get(f"{API}/products/oxford-shirt").json()["data"]

        assert by_id == by_slug
        assert by_id["formatted_price"] == "Rs. 2,499.50"
        assert by_id["stock_status"] == "Out of stock"
        assert by_id["is_active"] is True
        assert by_id["category"]["slug"] == "men"

    def test_unknown_product_returns_error_envelope(self, client):
        response = client.get(f"{API}/products/no-such-thing")

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Product with ID or slug 'no-such-thing' not found",
            "error": {
                "code": "not_found",
                "message": "Product with ID or slug 'no-such-thing' not found",
            },
        }

    def test_featured_endpoint(self, client, make_product):
        make_product("Old", 100, created_at=LONG_AGO)
        make_product("Star", 100, is_featured=True, created_at=LONG_AGO)

        response = client.get(f"{API}/products/featured")

        assert response.status_code == 200
        assert [p["name"] for p in response.json()["data"]] == ["Star"]


class TestCategories:
    def test_list_with_active_counts(self, client, make_product, category, women):
        make_product("Shirt", 100, category_id=category.id)
        make_product("Chinos", 100, category_id=category.id)
        make_product("Retired", 100, category_id=category.id, is_active=False)

        data = client.get(f"{API}/categories").json()["data"]

        counts = {c["slug"]: c["product_count"] for c in data}
        assert counts == {"men": 2, "women": 0}
        assert data[0]["image"] == "http://media.test/storage/categories/men.jpg"

    def test_category_page_has_hero(self, client, make_product, category):
        make_product("Shirt", 100, category_id=category.id)

        response = client.get(f"{API}/categories/men/page")

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["category"]["hero"]["title"] == "MEN'S WARDROBE"
        assert data["category"]["hero"]["img"] == "http://media.test/storage/images/heroes/men.jpg"
        assert [p["name"] for p in data["products"]] == ["Shirt"]

    def test_unknown_category_page_is_404(self, client):
        response = client.get(f"{API}/categories/nope/page")

        assert response.status_code == 404

    def test_stats(self, client, make_product, category):
        make_product("A", 100, stock=3, category_id=category.id)
        make_product("B", 300, stock=5, category_id=category.id, is_active=False)

        data = client.get(f"{API}/categories/{category.id}/stats").json()["data"]

        assert data["total_products"] == 2
        assert data["active_products"] == 1
        assert data["total_stock"] == 8
        assert data["min_price"] == 100.0
        assert data["max_price"] == 300.0
        assert data["avg_price"] == 200.0
        assert data["formatted_avg_price"] == "Rs. 200.00"

    def test_category_products_unknown_id(self, client):
        response = client.get(f"{API}/categories/{uuid.uuid4()}/products")

        assert response.status_code == 404
        assert response.json()["message"] == "Category not found"


class TestHomepage:
    def test_homepage_sections(self, client, make_product, category, women):
        make_product("Star", 100, is_featured=True, slug="star", created_at=LONG_AGO)

        response = client.get(f"{API}/homepage")

        assert response.status_code == 200
        data = response.json()["data"]
        assert len(data["carousel"]) == 3
        assert {c["slug"] for c in data["categories"]} == {"men", "women"}
        assert data["featured_products"][0]["route"] == "/product/star"
        assert data["app_info"]["title"] == "ARES"

    def test_home_alias(self, client):
        assert client.get(f"{API}/home").json() == client.get(f"{API}/homepage").json()


class TestAdminCatalog:
    def test_customer_cannot_create_products(self, client, customer):
        response = client.post(
            f"{API}/admin/products",
            json={"name": "Hack", "price": "1.00"},
            headers=auth_headers(customer),
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"

    def test_guest_cannot_create_products(self, client):
        response = client.post(
            f"{API}/admin/products", json={"name": "Hack", "price": "1.00"}
        )

        assert response.status_code == 401

    def test_create_generates_unique_slugs(self, client, admin_headers, category):
        payload = {"name": "Cargo Pants", "price": "1999.00", "category_id": str(category.id)}

        first = client.post(f"{API}/admin/products", json=payload, headers=admin_headers)
        second = client.post(f"{API}/admin/products", json=payload, headers=admin_headers)

        assert first.status_code == 201
        assert first.json()["data"]["slug"] == "cargo-pants"
        assert second.json()["data"]["slug"] == "cargo-pants-2"
        assert second.json()["data"]["formatted_price"] == "Rs. 1,999.00"

    def test_create_with_unknown_category_is_404(self, client, admin_headers):
        response = client.post(
            f"{API}/admin/products",
            json={"name": "X", "price": "1.00", "category_id": str(uuid.uuid4())},
            headers=admin_headers,
        )

        assert response.status_code == 404

    def test_price_update_shows_in_existing_carts(
        self, client, admin_headers, customer, make_product
    ):
        shirt = make_product("Shirt", 500)
        customer_headers = auth_headers(customer)
        client.post(
            f"{API}/cart/add",
            json={"product_id": str(shirt.id), "quantity": 2},
            headers=customer_headers,
        )

        response = client.put(
            f"{API}/admin/products/{shirt.id}",
            json={"price": "650.00"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        summary = client.get(f"{API}/cart", headers=customer_headers).json()["data"]["summary"]
        assert summary["total_price"] == 1300.0
        assert summary["formatted_total"] == "Rs. 1,300.00"

    def test_deleted_product_becomes_orphan_in_cart(
        self, client, admin_headers, customer, make_product
    ):
        kept = make_product("Kept", 100)
        gone = make_product("Gone", 999)
        customer_headers = auth_headers(customer)
        for product, qty in [(kept, 1), (gone, 2)]:
            client.post(
                f"{API}/cart/add",
                json={"product_id": str(product.id), "quantity": qty},
                headers=customer_headers,
            )

        deleted = client.delete(f"{API}/admin/products/{gone.id}", headers=admin_headers)
        cart = client.get(f"{API}/cart", headers=customer_headers)

        assert deleted.status_code == 200
        assert cart.status_code == 200
        data = cart.json()["data"]
        orphan = next(i for i in data["items"] if i["status"] == "orphaned")
        assert orphan["product_id"] == str(gone.id)
        assert orphan["product"] is None
        assert orphan["subtotal"] is None
        assert data["summary"]["orphaned_items"] == 1
        assert data["summary"]["total_price"] == 100.0

    def test_category_crud(self, client, admin_headers, make_product):
        created = client.post(
            f"{API}/admin/categories", json={"name": "Kids Wear"}, headers=admin_headers
        )
        assert created.status_code == 201
        category_id = created.json()["data"]["id"]
        assert created.json()["data"]["slug"] == "kids-wear"

        shirt = make_product("Tiny Tee", 100, category_id=uuid.UUID(category_id))

        renamed = client.put(
            f"{API}/admin/categories/{category_id}",
            json={"name": "Kids"},
            headers=admin_headers,
        )
        assert renamed.json()["data"]["name"] == "Kids"
        assert renamed.json()["data"]["product_count"] == 1

        deleted = client.delete(
            f"{API}/admin/categories/{category_id}", headers=admin_headers
        )
        assert deleted.status_code == 200

        product = client.get(f"{API}/products/{shirt.id}").json()["data"]
        assert product["category"]["name"] == "Uncategorized"

    def test_unknown_fields_are_rejected(self, client, admin_headers):
        response = client.post(
            f"{API}/admin/categories",
            json={"name": "Bags", "colour": "red"},
            headers=admin_headers,
        )

        assert response.status_code == 422
        assert "colour" in response.json()["errors"]
