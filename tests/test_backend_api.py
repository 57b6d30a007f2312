"""
Integration Tests: dev backend REST API

Runs the FastAPI app against an in-memory SQLite database.
"""

import logging
from decimal import Decimal

from storefront.backend.events import EventBroker, broker
from storefront.backend.main import app
from storefront.backend.routers.sse import event_stream
from storefront.backend.seed import seed

ALICE = {"Authorization": "Bearer alice-token"}
BOB = {"Authorization": "Bearer bob-token"}


def create_category(client, name, parent_id=None, **extra):
    resp = client.post("/api/categories", json={"name": name, "parent_id": parent_id, **extra})
    assert resp.status_code == 201, resp.text
    return resp.json()


def create_product(client, name, price="10.00", **extra):
    payload = {"name": name, "slug": name.lower(), "price": price, **extra}
    resp = client.post("/api/products", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


class TestCategories:
    """Tests for /api/categories"""

    def test_create_and_list(self, client):
        indoor = create_category(client, "Indoor Plants")
        create_category(client, "Succulents", parent_id=indoor["id"])
        create_category(client, "Archive", is_active=False)

        assert indoor["slug"] == "indoor-plants"
        assert len(client.get("/api/categories").json()["items"]) == 3
        active = client.get("/api/categories", params={"status": "active"}).json()["items"]
        assert [c["name"] for c in active] == ["Indoor Plants", "Succulents"]

    def test_product_count(self, client):
        indoor = create_category(client, "Indoor")
        create_product(client, "Fern", category_id=indoor["id"])

        assert client.get(f"/api/categories/{indoor['id']}").json()["product_count"] == 1

    def test_duplicate_sibling_slug(self, client):
        create_category(client, "Indoor")

        resp = client.post("/api/categories", json={"name": "Indoor"})

        assert resp.status_code == 409

    def test_same_slug_under_different_parents(self, client):
        indoor = create_category(client, "Indoor")
        outdoor = create_category(client, "Outdoor")

        create_category(client, "Ferns", parent_id=indoor["id"])
        create_category(client, "Ferns", parent_id=outdoor["id"])

    def test_unknown_parent(self, client):
        resp = client.post("/api/categories", json={"name": "Lost", "parent_id": 999})

        assert resp.status_code == 400

    def test_cycle_is_refused(self, client):
        a = create_category(client, "A")
        b = create_category(client, "B", parent_id=a["id"])

        resp = client.put(f"/api/categories/{a['id']}", json={"parent_id": b["id"]})

        assert resp.status_code == 400
        assert client.get(f"/api/categories/{a['id']}").json()["parent_id"] is None

    def test_move_to_root(self, client):
        a = create_category(client, "A")
        b = create_category(client, "B", parent_id=a["id"])

        resp = client.put(f"/api/categories/{b['id']}", json={"parent_id": None, "sort_order": 3})

        assert resp.json()["parent_id"] is None
        assert resp.json()["sort_order"] == 3

    def test_delete(self, client):
        a = create_category(client, "A")
        b = create_category(client, "B", parent_id=a["id"])

        assert client.delete(f"/api/categories/{a['id']}").status_code == 409
        assert client.delete(f"/api/categories/{b['id']}").status_code == 204
        assert client.delete(f"/api/categories/{a['id']}").status_code == 204
        assert client.get(f"/api/categories/{a['id']}").status_code == 404

    def test_changes_are_published(self, client):
        q = broker.subscribe()
        try:
            created = create_category(client, "Palms")
            event = q.get(timeout=1)
        finally:
            broker.unsubscribe(q)

        assert event == {"type": "category_created", "category_id": created["id"]}


class TestProducts:
    def test_crud(self, client):
        fern = create_product(client, "Fern", price="12.50")

        assert Decimal(fern["price"]) == Decimal("12.50")

        resp = client.put(f"/api/products/{fern['id']}", json={"inventory": 4})
        assert resp.json()["inventory"] == 4

        assert client.delete(f"/api/products/{fern['id']}").status_code == 204
        assert client.get(f"/api/products/{fern['id']}").status_code == 404

    def test_duplicate_slug(self, client):
        create_product(client, "Fern")

        assert client.post("/api/products", json={"name": "Fern 2", "slug": "fern", "price": "1"}).status_code == 409

    def test_list_search_and_paging(self, client):
        for name in ("Fern", "Palm", "Fig"):
            create_product(client, name)

        found = client.get("/api/products", params={"search": "f"}).json()
        assert found["total"] == 2

        page = client.get("/api/products", params={"limit": 1, "offset": 1}).json()
        assert page["total"] == 3
        assert [p["name"] for p in page["items"]] == ["Palm"]

    def test_by_ids_keeps_order(self, client):
        fern = create_product(client, "Fern")
        palm = create_product(client, "Palm")

        resp = client.get("/api/products/by-ids", params={"ids": f"{palm['id']},{fern['id']},999"})

        assert [p["name"] for p in resp.json()["items"]] == ["Palm", "Fern"]

    def test_by_ids_rejects_garbage(self, client):
        assert client.get("/api/products/by-ids", params={"ids": "1,x"}).status_code == 400

    def test_export(self, client):
        create_product(client, "Fern", price="12.50", description="Boston", inventory=2)

        resp = client.get("/api/products/export")

        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.text.splitlines() == [
            "name,slug,price,description,inventory",
            "Fern,fern,12.50,Boston,2",
        ]

    def test_bulk_upload_upserts_by_slug(self, client):
        create_product(client, "Rose", price="1.00")
        csv_text = "name,slug,price\nRose,rose,199\nTulip,tulip,149\nLily,lily,\n"

        resp = client.post(
            "/api/products/bulk-upload",
            files={"file": ("plants.csv", csv_text.encode(), "text/csv")},
        )

        body = resp.json()
        assert resp.status_code == 200
        assert body["imported"] == 2
        assert body["errors"] == [{"line": 4, "errors": ["price invalid"]}]

        products = client.get("/api/products").json()
        assert products["total"] == 2
        assert Decimal(products["items"][0]["price"]) == Decimal("199")

    def test_bulk_upload_reports_rows_over_schema_limits(self, client):
        csv_text = "name,slug,price\nRose,rose,199\n" + "A" * 201 + ",long,5\n"

        resp = client.post(
            "/api/products/bulk-upload",
            files={"file": ("plants.csv", csv_text.encode(), "text/csv")},
        )

        assert resp.status_code == 200
        assert resp.json()["imported"] == 1
        assert resp.json()["errors"][0]["line"] == 3
        assert client.get("/api/products").json()["total"] == 1

    def test_bulk_upload_repeated_slug_updates_earlier_row(self, client):
        csv_text = "name,slug,price\nRose,rose,199\nRose Red,rose,149\n"

        resp = client.post(
            "/api/products/bulk-upload",
            files={"file": ("plants.csv", csv_text.encode(), "text/csv")},
        )

        assert resp.status_code == 200
        products = client.get("/api/products").json()
        assert products["total"] == 1
        assert products["items"][0]["name"] == "Rose Red"
        assert Decimal(products["items"][0]["price"]) == Decimal("149")

    def test_bulk_upload_wrong_file(self, client):
        resp = client.post(
            "/api/products/bulk-upload",
            files={"file": ("plants.txt", b"name,slug,price\n", "text/plain")},
        )

        assert resp.status_code == 400


class TestCart:
    """Tests for /api/cart, keyed by the bearer token."""

    def test_add_increments_existing_line(self, client):
        fern = create_product(client, "Fern", price="12.50", images=["fern.jpg"])

        client.post("/api/cart/items", json={"product_id": fern["id"]}, headers=ALICE)
        resp = client.post("/api/cart/items", json={"product_id": fern["id"], "quantity": 2}, headers=ALICE)

        assert resp.json()["quantity"] == 3
        items = client.get("/api/cart", headers=ALICE).json()["items"]
        assert items == [
            {"id": fern["id"], "name": "Fern", "price": "12.50", "image": "fern.jpg", "quantity": 3}
        ]

    def test_carts_are_separate_per_token(self, client):
        fern = create_product(client, "Fern")
        client.post("/api/cart/items", json={"product_id": fern["id"]}, headers=ALICE)

        assert client.get("/api/cart", headers=BOB).json()["items"] == []
        assert client.get("/api/cart").json()["items"] == []

    def test_update_remove_clear(self, client):
        fern = create_product(client, "Fern")
        palm = create_product(client, "Palm")
        for product in (fern, palm):
            client.post("/api/cart/items", json={"product_id": product["id"]}, headers=ALICE)

        assert client.put(f"/api/cart/items/{fern['id']}", json={"quantity": 5}, headers=ALICE).json()["quantity"] == 5
        assert client.put(f"/api/cart/items/{fern['id']}", json={"quantity": 0}, headers=ALICE).status_code == 422

        assert client.delete(f"/api/cart/items/{palm['id']}", headers=ALICE).status_code == 204
        assert client.delete(f"/api/cart/items/{palm['id']}", headers=ALICE).status_code == 404

        assert client.delete("/api/cart", headers=ALICE).status_code == 204
        assert client.get("/api/cart", headers=ALICE).json()["items"] == []

    def test_unknown_product(self, client):
        assert client.post("/api/cart/items", json={"product_id": 999}).status_code == 404


class TestOrders:
    def test_checkout_empties_cart(self, client):
        fern = create_product(client, "Fern", price="12.50")
        palm = create_product(client, "Palm", price="3.00")
        client.post("/api/cart/items", json={"product_id": fern["id"], "quantity": 2}, headers=ALICE)
        client.post("/api/cart/items", json={"product_id": palm["id"]}, headers=ALICE)

        resp = client.post("/api/orders", headers=ALICE)

        assert resp.status_code == 201
        order = resp.json()
        assert order["status"] == "PENDING"
        assert Decimal(order["total"]) == Decimal("28.00")
        assert len(order["items"]) == 2
        assert client.get("/api/cart", headers=ALICE).json()["items"] == []
        assert [o["id"] for o in client.get("/api/orders", headers=ALICE).json()["items"]] == [order["id"]]

    def test_empty_cart(self, client):
        assert client.post("/api/orders", headers=ALICE).status_code == 400

    def test_other_owner_cannot_read(self, client):
        fern = create_product(client, "Fern")
        client.post("/api/cart/items", json={"product_id": fern["id"]}, headers=ALICE)
        order = client.post("/api/orders", headers=ALICE).json()

        assert client.get(f"/api/orders/{order['id']}", headers=BOB).status_code == 403
        assert client.get(f"/api/orders/{order['id']}", headers=ALICE).status_code == 200
        assert client.get("/api/orders/999", headers=ALICE).status_code == 404

    def test_status_update_leaves_a_trace(self, client, caplog):
        fern = create_product(client, "Fern")
        client.post("/api/cart/items", json={"product_id": fern["id"]}, headers=ALICE)
        order = client.post("/api/orders", headers=ALICE).json()

        with caplog.at_level(logging.WARNING, logger="storefront.backend.routers.deps"):
            client.put(f"/api/orders/{order['id']}/status", json={"status": "SHIPPED"}, headers=BOB)

        messages = [r.getMessage() for r in caplog.records]
        assert any("without a role check" in m for m in messages)
        assert not any("bob-token" in m for m in messages)

    def test_status_update(self, client):
        fern = create_product(client, "Fern")
        client.post("/api/cart/items", json={"product_id": fern["id"]}, headers=ALICE)
        order = client.post("/api/orders", headers=ALICE).json()

        resp = client.put(f"/api/orders/{order['id']}/status", json={"status": "SHIPPED"})

        assert resp.json()["status"] == "SHIPPED"
        assert client.put(f"/api/orders/{order['id']}/status", json={"status": "LOST"}).status_code == 422


class TestRecentlyViewed:
    def test_most_recent_first(self, client):
        fern = create_product(client, "Fern")
        palm = create_product(client, "Palm")

        client.post("/api/recently-viewed", json={"product_id": fern["id"]}, headers=ALICE)
        client.post("/api/recently-viewed", json={"product_id": palm["id"]}, headers=ALICE)

        items = client.get("/api/recently-viewed", headers=ALICE).json()["items"]
        assert [p["name"] for p in items] == ["Palm", "Fern"]
        assert client.get("/api/recently-viewed", headers=BOB).json()["items"] == []

    def test_unknown_product(self, client):
        assert client.post("/api/recently-viewed", json={"product_id": 999}).status_code == 404


class TestAdminSync:
    def test_sync_then_update_role(self, client):
        resp = client.post("/api/admin-sync/sync-role", json={"clerk_id": "user_1", "email": "a@example.com"})
        assert resp.json()["role"] == "customer"

        resp = client.put("/api/admin-sync/users/user_1/role", json={"role": "admin"})
        assert resp.json()["role"] == "admin"
        assert client.get("/api/admin-sync/users/user_1").json()["email"] == "a@example.com"

    def test_unknown_user(self, client):
        assert client.get("/api/admin-sync/users/nobody").status_code == 404


class TestEventStream:
    def test_stream_yields_events_and_keepalives(self):
        events = EventBroker()
        q = events.subscribe()
        events.publish("category_updated", category_id=7)

        stream = event_stream(q, source=events, keepalive=0.01)

        assert next(stream) == 'data: {"type": "connected"}\n\n'
        assert next(stream) == 'data: {"type": "category_updated", "category_id": 7}\n\n'
        assert next(stream) == ": keep-alive\n\n"

    def test_closing_the_stream_unsubscribes(self):
        q = broker.subscribe()
        stream = event_stream(q, keepalive=0.01)
        next(stream)
        before = broker.subscriber_count

        stream.close()

        assert broker.subscriber_count == before - 1


def test_seed_fills_empty_database_once(client, db_session):
    assert seed(db_session) is True
    assert seed(db_session) is False

    categories = client.get("/api/categories").json()["items"]
    succulents = next(c for c in categories if c["slug"] == "succulents")
    indoor = next(c for c in categories if c["slug"] == "indoor-plants")
    assert succulents["parent_id"] == indoor["id"]
    assert succulents["product_count"] == 2
    assert client.get("/api/products").json()["total"] == 5


def test_module_level_app_serves_every_router():
    paths = {route.path for route in app.routes}

    assert {"/health", "/api/cart", "/api/categories", "/api/sse/events"} <= paths
