# tests/test_api.py

"""
End-to-end API tests: seat a table, order, prepare, serve and close.
"""

BASE = "/api/v1/restaurants/resto-1"


def _setup_floor(client, table_count=10):
    response = client.post(f"{BASE}/tables/initialize", json={"table_count": table_count})
    assert response.status_code == 200
    return response.json()


def _open(client, number, guests=2, waiter_id="waiter-1"):
    response = client.post(
        f"{BASE}/tables/table-{number}/open",
        json={"guest_count": guests, "waiter_id": waiter_id, "waiter": "Alex"},
    )
    assert response.status_code == 200, response.text
    return response.json()


def _order(client, number, lines, waiter_id="waiter-1"):
    response = client.post(
        f"{BASE}/orders",
        json={
            "table_id": f"table-{number}",
            "waiter_id": waiter_id,
            "lines": [
                {"menu_item_id": menu_item_id, "quantity": quantity}
                for menu_item_id, quantity in lines
            ],
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:
    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert "running" in response.json()["message"]


class TestMenuAPI:
    def test_create_and_list(self, client):
        response = client.post(
            f"{BASE}/menu",
            json={"id": "wine", "name": "House Wine", "price": 7.0, "category": "Drinks", "destination": "bar"},
        )
        assert response.status_code == 201

        items = client.get(f"{BASE}/menu").json()
        assert [item["name"] for item in items] == ["House Wine"]
        assert items[0]["destination"] == "bar"

    def test_duplicate_ids(self, client):
        soup = {"id": "soup", "name": "Soup", "price": 6.5}

        assert client.post(f"{BASE}/menu", json=soup).status_code == 201
        assert client.post("/api/v1/restaurants/resto-2/menu", json=soup).status_code == 201

        response = client.post(f"{BASE}/menu", json=soup)
        assert response.status_code == 409
        assert response.json()["error_code"] == "MENU_ITEM_EXISTS"

    def test_null_name_rejected(self, client, menu_items):
        response = client.patch(f"{BASE}/menu/soup", json={"name": None})

        assert response.status_code == 422
        assert client.get(f"{BASE}/menu").json()[-1]["name"] == "Soup"

    def test_inactive_item_cannot_be_ordered(self, client, menu_items):
        _setup_floor(client)
        _open(client, 1)
        client.patch(f"{BASE}/menu/beer", json={"is_active": False})

        response = client.post(
            f"{BASE}/orders",
            json={"table_id": "table-1", "waiter_id": "waiter-1", "lines": [{"menu_item_id": "beer"}]},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ARGUMENT"


class TestTablesAPI:
    def test_open_twice_conflicts(self, client):
        _setup_floor(client)
        _open(client, 3, guests=4)

        response = client.post(
            f"{BASE}/tables/table-3/open", json={"guest_count": 2, "waiter_id": "waiter-1"}
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "INVALID_STATE"

    def test_open_with_zero_guests(self, client):
        _setup_floor(client)

        response = client.post(
            f"{BASE}/tables/table-1/open", json={"guest_count": 0, "waiter_id": "waiter-1"}
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ARGUMENT"

    def test_close_blocked_until_order_completed(self, client, menu_items):
        _setup_floor(client)
        _open(client, 3, guests=4)
        order = _order(client, 3, [("soup", 1)])

        response = client.post(f"{BASE}/tables/table-3/close")
        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "TABLE_HAS_ACTIVE_ORDERS"
        assert body["active_order_ids"] == [order["id"]]

        assert client.post(f"{BASE}/orders/{order['id']}/complete").status_code == 200
        response = client.post(f"{BASE}/tables/table-3/close")

        assert response.status_code == 200
        assert response.json()["guest_count"] == 0
        assert response.json()["status"] == "empty"

    def test_unknown_table(self, client):
        response = client.post(f"{BASE}/tables/table-99/close")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_table_count_and_overview(self, client):
        _setup_floor(client, 3)
        _open(client, 3)

        response = client.put(f"{BASE}/tables/count", json={"table_count": 1})
        assert response.json()["removed"] == [2]
        assert response.json()["kept_occupied"] == [3]

        overview = client.get(f"{BASE}/tables").json()
        assert [row["table"]["number"] for row in overview] == [1, 3]

    def test_priority_and_waiter_views(self, client, menu_items):
        _setup_floor(client)
        _open(client, 2)
        _open(client, 4, waiter_id="waiter-2")
        first = _order(client, 4, [("cola", 1)])
        second = _order(client, 2, [("beer", 1)])
        for order in (first, second):
            client.post(f"{BASE}/orders/{order['id']}/destinations/bar/ready")

        priorities = client.get(f"{BASE}/tables/priority").json()
        assert [(p["table_number"], p["rank"], p["treatment"]) for p in priorities] == [
            (4, 1, "primary"),
            (2, 2, "secondary"),
        ]

        mine = client.get(f"{BASE}/tables/waiter/waiter-2").json()
        assert [table["number"] for table in mine] == [4]


class TestOrdersAPI:
    def test_order_lifecycle(self, client, menu_items):
        _setup_floor(client)
        _open(client, 5)
        order = _order(client, 5, [("soup", 2), ("cola", 1)])

        assert order["status"] == "active"
        assert order["bar_complete"] is False
        assert order["total"] == 16.0

        cola_id = next(i["id"] for i in order["items"] if i["menu_item"]["id"] == "cola")
        response = client.post(f"{BASE}/orders/{order['id']}/items/{cola_id}/ready")
        assert response.json()["bar_complete"] is True
        assert response.json()["kitchen_complete"] is False

        # Idempotent
        again = client.post(f"{BASE}/orders/{order['id']}/items/{cola_id}/ready").json()
        assert again["version"] == response.json()["version"]

        response = client.post(f"{BASE}/orders/{order['id']}/destinations/kitchen/ready")
        assert response.json()["is_ready"] is True
        assert response.json()["status"] == "active"

        assert client.post(f"{BASE}/orders/{order['id']}/complete").json()["status"] == "completed"
        response = client.post(f"{BASE}/orders/{order['id']}/cancel")
        assert response.status_code == 409

    def test_unknown_item(self, client, menu_items):
        _setup_floor(client)
        _open(client, 5)
        order = _order(client, 5, [("soup", 1)])

        response = client.post(f"{BASE}/orders/{order['id']}/items/nope/ready")

        assert response.status_code == 404
        assert response.json()["error_code"] == "ITEM_NOT_FOUND"

    def test_order_for_empty_table(self, client, menu_items):
        _setup_floor(client)

        response = client.post(
            f"{BASE}/orders",
            json={"table_id": "table-1", "waiter_id": "waiter-1", "lines": [{"menu_item_id": "soup"}]},
        )

        assert response.status_code == 409

    def test_list_by_status(self, client, menu_items):
        _setup_floor(client)
        _open(client, 1)
        kept = _order(client, 1, [("soup", 1)])
        cancelled = _order(client, 1, [("beer", 1)])
        client.post(f"{BASE}/orders/{cancelled['id']}/cancel")

        active = client.get(f"{BASE}/orders", params={"status": "active"}).json()

        assert [order["id"] for order in active] == [kept["id"]]
        assert len(client.get(f"{BASE}/orders").json()) == 2

    def test_waiter_sees_own_active_orders(self, client, menu_items):
        _setup_floor(client)
        _open(client, 1)
        _open(client, 2, waiter_id="waiter-2")
        mine = _order(client, 1, [("soup", 1), ("cola", 1)])
        _order(client, 2, [("beer", 1)], waiter_id="waiter-2")
        client.post(f"{BASE}/orders/{mine['id']}/destinations/bar/ready")

        response = client.get(
            f"{BASE}/orders", params={"waiter_id": "waiter-1", "status": "active"}
        )

        orders = response.json()
        assert [order["id"] for order in orders] == [mine["id"]]
        assert [item["status"] for item in orders[0]["items"]] == ["pending", "ready"]

    def test_tickets(self, client, menu_items):
        _setup_floor(client)
        _open(client, 5)
        order = _order(client, 5, [("soup", 2)])

        ticket = client.get(f"{BASE}/orders/{order['id']}/tickets/kitchen").json()
        assert ticket["lines"] == [{"quantity": 2, "name": "Soup", "notes": None, "seat_number": None}]

        text = client.get(
            f"{BASE}/orders/{order['id']}/tickets/kitchen", params={"format": "text"}
        ).text
        assert "2x Soup" in text

        assert client.get(f"{BASE}/orders/{order['id']}/tickets/bar").status_code == 404


class TestKDSAPI:
    def test_board_and_group_ready(self, client, menu_items):
        _setup_floor(client)
        _open(client, 5)
        _open(client, 7)
        order_a = _order(client, 5, [("soup", 2), ("cola", 1)])
        order_b = _order(client, 7, [("soup", 3)])

        board = client.get(f"{BASE}/kds/kitchen").json()
        assert board["order_count"] == 2
        assert [(g["group_id"], g["total_quantity"]) for g in board["pending_groups"]] == [
            ("item:soup", 5)
        ]

        response = client.post(
            f"{BASE}/kds/kitchen/groups/ready", json={"group_id": "item:soup"}
        )
        assert response.status_code == 200
        assert sorted(response.json()["updated_order_ids"]) == sorted(
            [order_a["id"], order_b["id"]]
        )

        board = client.get(f"{BASE}/kds/kitchen").json()
        assert board["pending_groups"] == []
        assert board["ready_groups"][0]["all_ready"] is True

        bar = client.get(f"{BASE}/kds/bar").json()
        assert bar["pending_groups"][0]["name"] == "Cola"

    def test_unknown_group(self, client):
        response = client.post(f"{BASE}/kds/bar/groups/ready", json={"group_id": "item:x"})

        assert response.status_code == 404

    def test_websocket_pushes_board_updates(self, client, menu_items):
        _setup_floor(client)
        _open(client, 5)

        with client.websocket_connect(f"{BASE}/kds/kitchen/ws") as websocket:
            initial = websocket.receive_json()
            assert initial["type"] == "board"
            assert initial["data"]["order_count"] == 0

            _order(client, 5, [("soup", 1)])

            assert websocket.receive_json()["type"] == "new_order"
            update = websocket.receive_json()
            assert update["type"] == "board"
            assert update["data"]["order_count"] == 1

            websocket.send_text("ping")
            assert websocket.receive_text() == "pong"
