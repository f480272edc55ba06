from datetime import datetime, timedelta, timezone


def test_badges_upsert_and_counts(client, make_user):
    giver = make_user()
    other = make_user()
    receiver = make_user()
    url = f"/api/social/badge/{receiver['id']}"

    first = client.post(url, json={"type": "PROATIVO"}, headers=giver["headers"])
    assert first.status_code == 201
    repeat = client.post(url, json={"type": "proativo"}, headers=giver["headers"])
    assert repeat.status_code == 201
    assert repeat.json()["id"] == first.json()["id"]

    client.post(url, json={"type": "ESPECIAL"}, headers=giver["headers"])
    client.post(url, json={"type": "PROATIVO"}, headers=other["headers"])

    counts = client.get(f"/api/social/badges/{receiver['id']}").json()
    assert counts == {"PROATIVO": 2, "ESPECIAL": 1, "HARMONIOSO": 0}


def test_badge_errors(client, make_user):
    user = make_user()
    other = make_user()

    own = client.post(f"/api/social/badge/{user['id']}", json={"type": "ESPECIAL"}, headers=user["headers"])
    assert own.status_code == 400
    assert own.json() == {"error": "You cannot give a badge to yourself"}

    bad_type = client.post(f"/api/social/badge/{other['id']}", json={"type": "GENIAL"}, headers=user["headers"])
    assert bad_type.status_code == 400

    unknown = client.post("/api/social/badge/ghost", json={"type": "ESPECIAL"}, headers=user["headers"])
    assert unknown.status_code == 404


def test_profile_views_and_visitors(client, make_user):
    owner = make_user(name="Dona")
    first = make_user(name="Primeiro")
    second = make_user(name="Segundo")

    assert client.post(f"/api/social/profile-view/{owner['id']}", headers=first["headers"]).status_code == 201
    client.post(f"/api/social/profile-view/{owner['id']}", headers=first["headers"])
    client.post(f"/api/social/profile-view/{owner['id']}", headers=second["headers"])

    own_visit = client.post(f"/api/social/profile-view/{owner['id']}", headers=owner["headers"])
    assert own_visit.status_code == 204

    visitors = client.get("/api/social/profile-visitors", headers=owner["headers"]).json()
    assert sorted(v["name"] for v in visitors) == ["Primeiro", "Segundo"]


def test_testimonial_lifecycle(client, make_user):
    sender = make_user(name="Remetente")
    receiver = make_user()

    sent = client.post("/api/social/testimonial", json={"content": "Ótima colega!", "receiverId": receiver["id"]},
                       headers=sender["headers"])
    assert sent.status_code == 201
    testimonial = sent.json()
    assert testimonial["status"] == "PENDING"

    assert client.get(f"/api/social/testimonials/{receiver['id']}").json() == []

    pending = client.get("/api/social/testimonials/pending", headers=receiver["headers"]).json()
    assert [t["id"] for t in pending] == [testimonial["id"]]
    assert pending[0]["sender"]["name"] == "Remetente"

    status_url = f"/api/social/testimonial/{testimonial['id']}/status"
    stolen = client.put(status_url, json={"status": "APPROVED"}, headers=sender["headers"])
    assert stolen.status_code == 403

    approved = client.put(status_url, json={"status": "approved"}, headers=receiver["headers"])
    assert approved.status_code == 200
    assert approved.json()["status"] == "APPROVED"

    public = client.get(f"/api/social/testimonials/{receiver['id']}").json()
    assert [t["content"] for t in public] == ["Ótima colega!"]

    again = client.put(status_url, json={"status": "REJECTED"}, headers=receiver["headers"])
    assert again.status_code == 400


def test_rejected_testimonial_never_public(client, make_user):
    sender = make_user()
    receiver = make_user()
    testimonial = client.post("/api/social/testimonial", json={"content": "Hm", "receiverId": receiver["id"]},
                              headers=sender["headers"]).json()

    invalid = client.put(f"/api/social/testimonial/{testimonial['id']}/status", json={"status": "PENDING"},
                         headers=receiver["headers"])
    assert invalid.status_code == 400

    client.put(f"/api/social/testimonial/{testimonial['id']}/status", json={"status": "REJECTED"},
               headers=receiver["headers"])
    assert client.get(f"/api/social/testimonials/{receiver['id']}").json() == []
    assert client.get("/api/social/testimonials/pending", headers=receiver["headers"]).json() == []


def test_testimonial_errors(client, make_user):
    user = make_user()
    unknown_receiver = client.post("/api/social/testimonial", json={"content": "Oi", "receiverId": "ghost"},
                                   headers=user["headers"])
    assert unknown_receiver.status_code == 404

    missing = client.put("/api/social/testimonial/ghost/status", json={"status": "APPROVED"},
                         headers=user["headers"])
    assert missing.status_code == 404


def test_trending_tags(client, make_user, make_post):
    author = make_user()
    make_post(author, content="#robotica #stem")
    make_post(author, content="#robotica")
    make_post(author, content="sem tags")

    trending = client.get("/api/social/trending-tags").json()
    assert trending[0] == {"name": "robotica", "count": 2}
    assert {"name": "stem", "count": 1} in trending


def test_events_are_admin_managed_and_upcoming_only(client, admin, make_user):
    user = make_user()
    soon = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()
    later = (datetime.now(timezone.utc) + timedelta(days=9)).isoformat()
    past = (datetime.now(timezone.utc) - timedelta(days=3)).isoformat()

    denied = client.post("/api/social/events", json={"name": "Hack", "date": soon}, headers=user["headers"])
    assert denied.status_code == 403

    for name, date in (("Depois", later), ("Logo", soon), ("Passado", past)):
        created = client.post("/api/social/events", json={"name": name, "date": date, "link": "http://meet"},
                              headers=admin["headers"])
        assert created.status_code == 201

    events = client.get("/api/social/events").json()
    assert [e["name"] for e in events] == ["Logo", "Depois"]

    removed = client.delete(f"/api/social/events/{events[0]['id']}", headers=admin["headers"])
    assert removed.status_code == 200
    assert client.delete(f"/api/social/events/{events[0]['id']}", headers=admin["headers"]).status_code == 404
    assert [e["name"] for e in client.get("/api/social/events").json()] == ["Depois"]


def test_badge_counts_use_enum_keys_for_unknown_user(client):
    counts = client.get("/api/social/badges/ninguem").json()
    assert counts == {"PROATIVO": 0, "ESPECIAL": 0, "HARMONIOSO": 0}
