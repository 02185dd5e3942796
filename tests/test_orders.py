import config


def test_purchase_snapshots_price(client, artist, visitor, make_artwork):
    artwork = make_artwork(artist, price=100)
    r = client.post("/api/orders", json={"artwork_id": artwork["id"]}, headers=visitor["headers"])
    assert r.status_code == 201
    order = r.json()
    assert order["amount"] == 100
    assert order["status"] == "completed"
    assert order["buyer_id"] == visitor["id"]

    r = client.patch(f"/api/artworks/{artwork['id']}", json={"price": 150}, headers=artist["headers"])
    assert r.status_code == 200

    history = client.get("/api/orders/my-orders", headers=visitor["headers"]).json()
    assert len(history) == 1
    assert history[0]["amount"] == 100
    assert history[0]["artwork"]["price"] == 150


def test_purchase_validation(client, artist, visitor, make_artwork):
    not_for_sale = make_artwork(artist, is_for_sale=False)
    unpriced = make_artwork(artist, price=None)

    assert client.post("/api/orders", json={}, headers=visitor["headers"]).status_code == 400
    r = client.post("/api/orders", json={"artwork_id": "64b7f0c2a1b2c3d4e5f60718"}, headers=visitor["headers"])
    assert r.status_code == 404
    r = client.post("/api/orders", json={"artwork_id": not_for_sale["id"]}, headers=visitor["headers"])
    assert r.status_code == 400
    r = client.post("/api/orders", json={"artwork_id": unpriced["id"]}, headers=visitor["headers"])
    assert r.status_code == 400


def test_cannot_buy_own_artwork(client, artist, make_artwork):
    artwork = make_artwork(artist)
    r = client.post("/api/orders", json={"artwork_id": artwork["id"]}, headers=artist["headers"])
    assert r.status_code == 400


def test_purchase_requires_auth(client, artist, make_artwork):
    artwork = make_artwork(artist)
    assert client.post("/api/orders", json={"artwork_id": artwork["id"]}).status_code == 401


def test_repeat_purchases_follow_policy(client, artist, visitor, make_artwork, monkeypatch):
    artwork = make_artwork(artist)
    body = {"artwork_id": artwork["id"]}
    assert client.post("/api/orders", json=body, headers=visitor["headers"]).status_code == 201
    assert client.post("/api/orders", json=body, headers=visitor["headers"]).status_code == 201

    monkeypatch.setattr(config, "ALLOW_REPEAT_PURCHASES", False)
    r = client.post("/api/orders", json=body, headers=visitor["headers"])
    assert r.status_code == 409
    assert len(client.get("/api/orders/my-orders", headers=visitor["headers"]).json()) == 2


def test_sales_history(client, artist, visitor, make_user, make_artwork):
    other = make_user("odile", role="artist")
    mine = make_artwork(artist, title="Mine")
    theirs = make_artwork(other, title="Theirs")
    client.post("/api/orders", json={"artwork_id": mine["id"]}, headers=visitor["headers"])
    client.post("/api/orders", json={"artwork_id": theirs["id"]}, headers=visitor["headers"])

    r = client.get("/api/orders/sales/history", headers=artist["headers"])
    assert r.status_code == 200
    sales = r.json()
    assert len(sales) == 1
    assert sales[0]["artwork"]["title"] == "Mine"
    assert sales[0]["buyer"]["username"] == "vera"

    assert client.get("/api/orders/sales/history", headers=visitor["headers"]).status_code == 403


def test_orders_survive_artwork_deletion(client, artist, visitor, make_artwork):
    artwork = make_artwork(artist)
    client.post("/api/orders", json={"artwork_id": artwork["id"]}, headers=visitor["headers"])
    client.delete(f"/api/artworks/{artwork['id']}", headers=artist["headers"])

    history = client.get("/api/orders/my-orders", headers=visitor["headers"]).json()
    assert len(history) == 1
    assert history[0]["amount"] == 100
    assert history[0]["artwork"] is None


def test_orders_cannot_be_modified(client, artist, visitor, make_artwork):
    artwork = make_artwork(artist)
    order = client.post("/api/orders", json={"artwork_id": artwork["id"]}, headers=visitor["headers"]).json()
    r = client.patch(f"/api/orders/{order['id']}", json={"amount": 1}, headers=visitor["headers"])
    assert r.status_code in (404, 405)
