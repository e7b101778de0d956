from __future__ import annotations


def test_list_photographers(client, catalog):
    r = client.get("/api/v1/photographers")

    assert r.status_code == 200
    photographers = r.json()
    assert [p["id"] for p in photographers] == [1, 2, 3]
    assert photographers[0]["name"] == "Raj Mehta"
    assert "Drone Photography" in photographers[0]["specialties"]


def test_photographer_profile(client, catalog):
    r = client.get("/api/v1/photographers/1")

    assert r.status_code == 200
    profile = r.json()
    assert profile["photographer"]["name"] == "Raj Mehta"
    assert len(profile["portfolio"]) == 2
    assert all(t["photographer_id"] == 1 for t in profile["testimonials"])
    assert len(profile["testimonials"]) == 1


def test_unknown_photographer_is_404(client, catalog):
    r = client.get("/api/v1/photographers/42")

    assert r.status_code == 404
    assert r.json()["status"] == 404
    assert client.get("/api/v1/photographers/0").status_code == 400


def test_service_categories(client, catalog):
    categories = client.get("/api/v1/services/categories").json()

    assert [c["id"] for c in categories] == [1, 2, 3, 4]
    assert categories[0]["name"] == "Photography"


def test_services_list_and_filter(client, catalog):
    everything = client.get("/api/v1/services").json()
    photography = client.get("/api/v1/services", params={"category_id": 1}).json()

    assert len(everything) == 8
    assert [s["id"] for s in photography] == [1, 2]
    assert photography[0]["price"] == "499.99"


def test_get_service(client, catalog):
    r = client.get("/api/v1/services/2")

    assert r.status_code == 200
    assert r.json()["price"] == "1299.99"
    assert client.get("/api/v1/services/99").status_code == 404


def test_packages(client, catalog):
    packages = client.get("/api/v1/packages").json()

    assert [p["price"] for p in packages] == ["1999.99", "3499.99", "4999.99"]
    assert packages[0]["service_ids"] == [1, 3, 7]

    one = client.get("/api/v1/packages/2").json()
    assert one["name"] == "Premium Package"
    assert one["popular"] is True
    assert client.get("/api/v1/packages/9").status_code == 404


def test_testimonials(client, catalog):
    testimonials = client.get("/api/v1/testimonials").json()

    assert len(testimonials) == 3
    assert all(1 <= t["rating"] <= 5 for t in testimonials)
