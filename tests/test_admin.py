import pytest

ADMIN_GETS = ["/api/admin/stats", "/api/admin/users", "/api/admin/artworks", "/api/admin/sales", "/api/admin/flagged"]


@pytest.mark.parametrize("path", ADMIN_GETS)
def test_admin_routes_need_admin(client, visitor, artist, path):
    assert client.get(path).status_code == 401
    assert client.get(path, headers=visitor["headers"]).status_code == 403
    assert client.get(path, headers=artist["headers"]).status_code == 403


def test_admin_writes_need_admin(client, artist, visitor, make_artwork):
    artwork = make_artwork(artist)
    r = client.patch(f"/api/admin/users/{visitor['id']}/ban", json={"banned": True}, headers=artist["headers"])
    assert r.status_code == 403
    r = client.patch(f"/api/admin/artworks/{artwork['id']}/flag", json={"flagged": True}, headers=visitor["headers"])
    assert r.status_code == 403
    r = client.delete(f"/api/admin/artworks/{artwork['id']}", headers=artist["headers"])
    assert r.status_code == 403


def test_stats(client, admin, artist, visitor, make_artwork):
    first = make_artwork(artist, price=100)
    second = make_artwork(artist, price=40.5)
    client.post("/api/orders", json={"artwork_id": first["id"]}, headers=visitor["headers"])
    client.post("/api/orders", json={"artwork_id": second["id"]}, headers=visitor["headers"])
    client.patch(f"/api/admin/artworks/{first['id']}/flag", json={"flagged": True}, headers=admin["headers"])

    r = client.get("/api/admin/stats", headers=admin["headers"])
    assert r.status_code == 200
    assert r.json() == {
        "total_users": 3,
        "total_artists": 1,
        "total_visitors": 1,
        "total_admins": 1,
        "total_artworks": 2,
        "total_orders": 2,
        "total_commissions": 0,
        "total_volume": 140.5,
        "flagged_items": 1,
    }


def test_ban_is_set_not_flipped(client, admin, visitor):
    url = f"/api/admin/users/{visitor['id']}/ban"
    for _ in range(2):
        r = client.patch(url, json={"banned": True}, headers=admin["headers"])
        assert r.status_code == 200
        assert r.json()["user"]["banned"] is True
    r = client.patch(url, json={"banned": False}, headers=admin["headers"])
    assert r.json()["user"]["banned"] is False
    assert client.get("/api/auth/me", headers=visitor["headers"]).status_code == 200


def test_ban_errors(client, admin):
    r = client.patch(f"/api/admin/users/{admin['id']}/ban", json={"banned": True}, headers=admin["headers"])
    assert r.status_code == 400
    r = client.patch("/api/admin/users/64b7f0c2a1b2c3d4e5f60718/ban", json={"banned": True}, headers=admin["headers"])
    assert r.status_code == 404


def test_flag_and_flagged_queue(client, admin, artist, make_artwork):
    artwork = make_artwork(artist)
    url = f"/api/admin/artworks/{artwork['id']}/flag"
    r = client.patch(url, json={"flagged": True}, headers=admin["headers"])
    assert r.status_code == 200
    assert r.json()["artwork"]["flagged"] is True

    flagged = client.get("/api/admin/flagged", headers=admin["headers"]).json()
    assert [a["id"] for a in flagged] == [artwork["id"]]

    client.patch(url, json={"flagged": False}, headers=admin["headers"])
    assert client.get("/api/admin/flagged", headers=admin["headers"]).json() == []


def test_admin_delete_artwork_and_comment(client, admin, artist, visitor, make_artwork):
    artwork = make_artwork(artist)
    comments = client.post(f"/api/artworks/{artwork['id']}/comments", json={"text": "spam spam"},
                           headers=visitor["headers"]).json()
    comments = client.post(f"/api/artworks/{artwork['id']}/comments", json={"text": "nice"},
                           headers=artist["headers"]).json()

    r = client.delete(f"/api/admin/artworks/{artwork['id']}/comments/{comments[0]['id']}", headers=admin["headers"])
    assert r.status_code == 200
    assert [c["text"] for c in r.json()["comments"]] == ["nice"]
    r = client.delete(f"/api/admin/artworks/{artwork['id']}/comments/{comments[0]['id']}", headers=admin["headers"])
    assert r.status_code == 404

    r = client.delete(f"/api/admin/artworks/{artwork['id']}", headers=admin["headers"])
    assert r.status_code == 200
    assert client.get(f"/api/artworks/{artwork['id']}").status_code == 404
    assert client.delete(f"/api/admin/artworks/{artwork['id']}", headers=admin["headers"]).status_code == 404


def test_admin_listings(client, admin, artist, visitor, make_artwork):
    artwork = make_artwork(artist)
    client.post("/api/orders", json={"artwork_id": artwork["id"]}, headers=visitor["headers"])

    users = client.get("/api/admin/users", headers=admin["headers"]).json()
    assert {u["username"] for u in users} == {"root", "arturo", "vera"}
    assert all("password_hash" not in u for u in users)

    artworks = client.get("/api/admin/artworks", headers=admin["headers"]).json()
    assert artworks[0]["artist"]["username"] == "arturo"

    sales = client.get("/api/admin/sales", headers=admin["headers"]).json()
    assert sales[0]["buyer"]["username"] == "vera"
    assert sales[0]["artwork"]["id"] == artwork["id"]


def test_health_and_root(client):
    assert client.get("/api/health").text == "ArtFolio API Running"
    assert client.get("/").json() == {"message": "ArtFolio API"}
