from datetime import timedelta

from tablebook.utils.time import today

DAY = (today() + timedelta(days=30)).isoformat()
NEXT_DAY = (today() + timedelta(days=31)).isoformat()


def _book(client, headers, guests, slot="19:00", day=DAY):
    r = client.post("/api/reservations", json={"date": day, "timeSlot": slot, "guests": guests},
                    headers=headers)
    assert r.status_code == 201
    return r.get_json()["data"]


def test_admin_endpoints_reject_users(client, auth_headers):
    alice = auth_headers("alice")
    for path in ("/api/admin/reservations", "/api/admin/stats", "/api/admin/tables"):
        assert client.get(path).status_code == 401
        r = client.get(path, headers=alice)
        assert r.status_code == 403, path
        assert r.get_json()["code"] == "FORBIDDEN"


def test_admin_list_with_filters(client, auth_headers):
    alice, bob, admin = auth_headers("alice"), auth_headers("bob"), auth_headers("admin")
    a = _book(client, alice, 2)
    b = _book(client, bob, 4, day=NEXT_DAY)
    client.delete(f"/api/reservations/{b['id']}", headers=bob)

    rows = client.get("/api/admin/reservations", headers=admin).get_json()["data"]
    assert [r["id"] for r in rows] == [b["id"], a["id"]]
    assert {r["user"]["email"] for r in rows} == {"alice@example.com", "bob@example.com"}

    r = client.get("/api/admin/reservations", query_string={"date": DAY}, headers=admin)
    assert [row["id"] for row in r.get_json()["data"]] == [a["id"]]

    r = client.get("/api/admin/reservations", query_string={"status": "cancelled"}, headers=admin)
    assert [row["id"] for row in r.get_json()["data"]] == [b["id"]]

    r = client.get("/api/admin/reservations", query_string={"date": "", "status": ""}, headers=admin)
    assert len(r.get_json()["data"]) == 2

    r = client.get("/api/admin/reservations", query_string={"status": "pending"}, headers=admin)
    assert r.status_code == 422


def test_admin_cancel(client, auth_headers):
    alice, admin = auth_headers("alice"), auth_headers("admin")
    rid = _book(client, alice, 2)["id"]

    r = client.delete(f"/api/admin/reservations/{rid}", headers=alice)
    assert r.status_code == 403

    r = client.delete(f"/api/admin/reservations/{rid}", headers=admin)
    assert r.status_code == 200
    assert r.get_json()["data"]["status"] == "cancelled"

    r = client.delete(f"/api/admin/reservations/{rid}", headers=admin)
    assert r.status_code == 409
    assert r.get_json()["code"] == "ALREADY_TERMINAL"


def test_stats(client, auth_headers):
    alice, admin = auth_headers("alice"), auth_headers("admin")
    empty = client.get("/api/admin/stats", headers=admin).get_json()["data"]
    assert empty == {"totalReservations": 0, "todayReservations": 0,
                     "confirmedReservations": 0, "totalTables": 3}

    _book(client, alice, 2, day=today().isoformat())
    later = _book(client, alice, 2)
    client.delete(f"/api/reservations/{later['id']}", headers=alice)

    stats = client.get("/api/admin/stats", headers=admin).get_json()["data"]
    assert stats == {"totalReservations": 2, "todayReservations": 1,
                     "confirmedReservations": 1, "totalTables": 3}


def test_admin_tables(client, auth_headers):
    admin = auth_headers("admin")
    r = client.post("/api/admin/tables", json={"tableNumber": 4, "capacity": 6}, headers=admin)
    assert r.status_code == 201
    assert r.get_json()["data"]["tableNumber"] == 4

    r = client.post("/api/admin/tables", json={"tableNumber": 4, "capacity": 2}, headers=admin)
    assert r.status_code == 422

    r = client.post("/api/admin/tables", json={"tableNumber": 5, "capacity": 40}, headers=admin)
    assert r.status_code == 422

    tables = client.get("/api/admin/tables", headers=admin).get_json()["data"]
    assert [(t["tableNumber"], t["capacity"]) for t in tables] == [(1, 2), (2, 4), (3, 4), (4, 6)]

    booked = _book(client, auth_headers("alice"), 6)
    assert booked["table"]["tableNumber"] == 4
