def test_flag_post_once(client, make_user, make_post):
    author = make_user()
    reporter = make_user()
    post = make_post(author)

    first = client.post(f"/api/moderation/flag/{post['id']}", json={"reason": "Spam"}, headers=reporter["headers"])
    assert first.status_code == 201
    assert first.json()["status"] == "PENDENTE"
    assert first.json()["reason"] == "Spam"

    second = client.post(f"/api/moderation/flag/{post['id']}", headers=reporter["headers"])
    assert second.status_code == 400
    assert second.json() == {"error": "Post already flagged"}


def test_flag_defaults_reason_and_unknown_post(client, make_user, make_post):
    user = make_user()
    post = make_post(user)

    flagged = client.post(f"/api/moderation/flag/{post['id']}", headers=user["headers"])
    assert flagged.json()["reason"] == "User report"

    assert client.post("/api/moderation/flag/missing", headers=user["headers"]).status_code == 404


def test_queue_is_admin_only(client, admin, make_user, make_post):
    user = make_user(name="Autora", school="EMEF Norte")
    post = make_post(user)
    client.post(f"/api/moderation/flag/{post['id']}", headers=user["headers"])

    denied = client.get("/api/moderation", headers=user["headers"])
    assert denied.status_code == 403
    assert denied.json() == {"error": "Admin access required"}

    queue = client.get("/api/moderation", headers=admin["headers"]).json()
    assert len(queue) == 1
    assert queue[0]["post"]["author"] == {"name": "Autora", "school": "EMEF Norte"}
    assert queue[0]["moderator"] is None


def test_approve_records_moderator_and_is_terminal(client, admin, make_user, make_post):
    user = make_user()
    post = make_post(user)
    item = client.post(f"/api/moderation/flag/{post['id']}", headers=user["headers"]).json()

    approved = client.put(f"/api/moderation/{item['id']}/approve", headers=admin["headers"])
    assert approved.status_code == 200
    assert approved.json()["status"] == "APROVADO"
    assert approved.json()["moderatorId"] == admin["id"]
    assert approved.json()["moderator"] == {"name": "Administrador"}

    again = client.put(f"/api/moderation/{item['id']}/reject", headers=admin["headers"])
    assert again.status_code == 400


def test_reject_keeps_post_by_default(client, admin, make_user, make_post):
    user = make_user()
    post = make_post(user)
    item = client.post(f"/api/moderation/flag/{post['id']}", headers=user["headers"]).json()

    rejected = client.put(f"/api/moderation/{item['id']}/reject", json={"reason": "Ofensivo"},
                          headers=admin["headers"])
    assert rejected.json()["status"] == "REPROVADO"
    assert rejected.json()["reason"] == "Ofensivo"
    assert client.get(f"/api/posts/{post['id']}").status_code == 200


def test_reject_with_delete_removes_post_and_item(client, admin, make_user, make_post):
    user = make_user()
    post = make_post(user)
    item = client.post(f"/api/moderation/flag/{post['id']}", headers=user["headers"]).json()

    rejected = client.put(f"/api/moderation/{item['id']}/reject", json={"deletePost": True},
                          headers=admin["headers"])
    assert rejected.status_code == 200
    assert rejected.json()["status"] == "REPROVADO"
    assert rejected.json()["postId"] == post["id"]

    assert client.get(f"/api/posts/{post['id']}").status_code == 404
    assert client.get("/api/moderation", headers=admin["headers"]).json() == []


def test_unknown_moderation_item(client, admin):
    response = client.put("/api/moderation/missing/approve", headers=admin["headers"])
    assert response.status_code == 404
