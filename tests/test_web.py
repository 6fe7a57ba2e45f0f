from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from bookstore.adapters.inbound.web.fastapi_app import create_app
from bookstore.bootstrap import SAMPLE_BOOKS, build_usecases
from bookstore.config import BookstoreSettings

API = "/api/v1"

BOOK = {
    "isbn": "9780132350884",
    "title": "Clean Code",
    "author": "Robert C. Martin",
    "price": "10.00",
    "quantity": 5,
    "genre": "Programming",
}


@pytest.fixture
def client() -> TestClient:
    usecases = build_usecases(BookstoreSettings(seed_sample_data=False))
    app = create_app(usecases.catalog, usecases.purchases, usecases.purchase_queries)
    return TestClient(app)


@pytest.fixture
def book(client) -> dict:
    resp = client.post(f"{API}/books", json=BOOK)
    assert resp.status_code == 201
    return resp.json()


def order(client, book_id: str, quantity: int = 2, discount_code: str | None = None):
    return client.post(
        f"{API}/purchases",
        json={
            "customer_name": "Jana Novak",
            "customer_email": "jana@example.com",
            "shipping_address": "Ilkovicova 2, Bratislava",
            "items": [{"book_id": book_id, "quantity": quantity}],
            "discount_code": discount_code,
        },
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_sample_catalogue_is_seeded():
    usecases = build_usecases(BookstoreSettings(seed_sample_data=True))
    client = TestClient(
        create_app(usecases.catalog, usecases.purchases, usecases.purchase_queries)
    )
    assert len(client.get(f"{API}/books").json()) == len(SAMPLE_BOOKS)


class TestBookRoutes:
    def test_create(self, client, book):
        assert book["price"] == "10.00"
        assert book["currency"] == "EUR"
        assert book["available"] is True
        assert client.get(f"{API}/books/{book['id']}").json() == book
        assert client.get(f"{API}/books/isbn/{BOOK['isbn']}").json()["id"] == book["id"]

    def test_location_header(self, client):
        resp = client.post(f"{API}/books", json=BOOK)
        assert resp.headers["location"] == f"{API}/books/{resp.json()['id']}"

    def test_duplicate_isbn(self, client, book):
        resp = client.post(f"{API}/books", json=BOOK)
        assert resp.status_code == 409
        assert resp.json()["code"] == "DUPLICATE_ISBN"
        assert resp.json()["details"] == {"isbn": BOOK["isbn"]}

    def test_validation_error(self, client):
        resp = client.post(f"{API}/books", json={**BOOK, "price": "-1"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_not_found(self, client):
        resp = client.get(f"{API}/books/{uuid4()}")
        assert resp.status_code == 404
        assert resp.json()["code"] == "BOOK_NOT_FOUND"

    def test_update_stock_and_delete(self, client, book):
        resp = client.patch(f"{API}/books/{book['id']}/stock", json={"quantity": 0})
        assert resp.json()["available"] is False

        assert client.delete(f"{API}/books/{book['id']}").status_code == 204
        assert client.delete(f"{API}/books/{book['id']}").status_code == 404

    def test_update(self, client, book):
        resp = client.put(f"{API}/books/{book['id']}", json={"price": "12.5"})
        assert resp.status_code == 200
        assert resp.json()["price"] == "12.50"
        assert resp.json()["title"] == BOOK["title"]

    def test_search_routes(self, client, book):
        assert len(client.get(f"{API}/books/search/author", params={"author": "martin"}).json()) == 1
        assert len(client.get(f"{API}/books/search/title", params={"title": "clean"}).json()) == 1
        assert len(client.get(f"{API}/books/search/genre", params={"genre": "programming"}).json()) == 1
        assert len(client.get(f"{API}/books/search", params={"q": "code"}).json()) == 1
        assert len(client.get(f"{API}/books/available").json()) == 1

    def test_price_range(self, client, book):
        ok = client.get(f"{API}/books/search/price", params={"min_price": 5, "max_price": 10})
        assert len(ok.json()) == 1
        bad = client.get(f"{API}/books/search/price", params={"min_price": 10, "max_price": 5})
        assert bad.status_code == 400
        assert bad.json()["code"] == "INVALID_ARGUMENT"


class TestPurchaseRoutes:
    def test_create_with_discount(self, client, book):
        resp = order(client, book["id"], 2, "SAVE20")

        assert resp.status_code == 201
        body = resp.json()
        assert resp.headers["location"] == f"{API}/purchases/{body['id']}"
        assert body["subtotal"] == "20.00"
        assert body["discount_amount"] == "4.00"
        assert body["total_amount"] == "16.00"
        assert body["total_items"] == 2
        assert body["status"] == "PENDING"
        assert body["order_number"].startswith("ORD-")
        assert client.get(f"{API}/books/{book['id']}").json()["quantity"] == 3

    def test_insufficient_stock(self, client, book):
        resp = order(client, book["id"], 6)
        assert resp.status_code == 409
        assert resp.json()["code"] == "INSUFFICIENT_STOCK"
        assert resp.json()["details"] == {
            "isbn": BOOK["isbn"],
            "requested": 6,
            "available": 5,
        }

    def test_invalid_discount_code(self, client, book):
        resp = order(client, book["id"], 1, "BOGUS")
        assert resp.status_code == 400
        assert resp.json()["code"] == "INVALID_DISCOUNT_CODE"
        assert client.get(f"{API}/books/{book['id']}").json()["quantity"] == 5

    def test_unknown_book(self, client):
        resp = order(client, str(uuid4()))
        assert resp.status_code == 404
        assert resp.json()["code"] == "BOOK_NOT_FOUND"

    def test_empty_items(self, client):
        resp = client.post(
            f"{API}/purchases",
            json={
                "customer_name": "Jana",
                "customer_email": "jana@example.com",
                "shipping_address": "Bratislava",
                "items": [],
            },
        )
        assert resp.status_code == 400
        assert resp.json()["code"] == "VALIDATION_ERROR"

    def test_lifecycle(self, client, book):
        purchase = order(client, book["id"]).json()
        pid = purchase["id"]

        assert client.post(f"{API}/purchases/{pid}/confirm").json()["status"] == "CONFIRMED"
        again = client.post(f"{API}/purchases/{pid}/confirm")
        assert again.status_code == 409
        assert again.json()["code"] == "INVALID_PURCHASE_STATE"

        resp = client.patch(f"{API}/purchases/{pid}/status", json={"status": "PROCESSING"})
        assert resp.json()["status"] == "PROCESSING"
        resp = client.patch(f"{API}/purchases/{pid}/status", json={"status": "PENDING"})
        assert resp.status_code == 409

        cancelled = client.post(f"{API}/purchases/{pid}/cancel")
        assert cancelled.json()["status"] == "CANCELLED"
        assert client.get(f"{API}/books/{book['id']}").json()["quantity"] == 5

    def test_unknown_status_value(self, client, book):
        pid = order(client, book["id"]).json()["id"]
        resp = client.patch(f"{API}/purchases/{pid}/status", json={"status": "LOST"})
        assert resp.status_code == 400

    def test_apply_discount(self, client, book):
        pid = order(client, book["id"], 2).json()["id"]
        resp = client.post(f"{API}/purchases/{pid}/discount", json={"discount_code": "flat5"})
        assert resp.json()["discount_code"] == "FLAT5"
        assert resp.json()["total_amount"] == "15.00"

    def test_queries(self, client, book):
        purchase = order(client, book["id"]).json()

        by_number = client.get(f"{API}/purchases/order/{purchase['order_number']}")
        assert by_number.json()["id"] == purchase["id"]
        by_email = client.get(f"{API}/purchases/customer", params={"email": "JANA@example.com"})
        assert [p["id"] for p in by_email.json()] == [purchase["id"]]
        by_status = client.get(f"{API}/purchases/status/PENDING")
        assert len(by_status.json()) == 1
        assert len(client.get(f"{API}/purchases").json()) == 1

        missing = client.get(f"{API}/purchases/{uuid4()}")
        assert missing.status_code == 404
        assert missing.json()["code"] == "PURCHASE_NOT_FOUND"

    def test_statistics(self, client, book):
        order(client, book["id"], 1)
        cancelled = order(client, book["id"], 1).json()
        client.post(f"{API}/purchases/{cancelled['id']}/cancel")

        stats = client.get(f"{API}/purchases/statistics").json()
        assert stats == {
            "total_purchases": 2,
            "pending_purchases": 1,
            "confirmed_purchases": 0,
            "cancelled_purchases": 1,
            "total_revenue": "10.00",
            "currency": "EUR",
        }
