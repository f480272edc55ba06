def test_create_post_collects_hashtags_and_images(client, make_user):
    author = make_user(name="Prof. Carla", role="PROFESSOR")

    response = client.post("/api/posts", json={
        "content": "Feira de ciências #ciencia #escola",
        "images": ["http://cdn/a.png", "http://cdn/b.png"],
        "tags": ["escola", "feira"],
    }, headers=author["headers"])

    assert response.status_code == 201
    post = response.json()
    assert post["tags"] == ["escola", "feira", "ciencia"]
    assert post["images"] == ["http://cdn/a.png", "http://cdn/b.png"]
    assert post["image"] == "http://cdn/a.png"
    assert post["author"]["name"] == "Prof. Carla"
    assert post["likes"] == 0 and post["comments"] == 0 and post["liked"] is False


def test_legacy_single_image_is_accepted(client, make_user):
    author = make_user()
    response = client.post("/api/posts", json={"image": "http://cdn/only.png"}, headers=author["headers"])
    assert response.status_code == 201
    assert response.json()["images"] == ["http://cdn/only.png"]


def test_empty_post_is_rejected(client, make_user):
    author = make_user()
    response = client.post("/api/posts", json={"content": "   ", "images": []}, headers=author["headers"])
    assert response.status_code == 400
    assert response.json() == {"error": "Content or at least one image is required"}


def test_create_post_requires_auth(client):
    assert client.post("/api/posts", json={"content": "oi"}).status_code == 401


def test_feed_is_public(client, make_user, make_post):
    author = make_user()
    make_post(author, content="primeiro")
    make_post(author, content="segundo")

    feed = client.get("/api/posts")
    assert feed.status_code == 200
    contents = [post["content"] for post in feed.json()]
    assert set(contents) == {"primeiro", "segundo"}
    assert all(post["liked"] is False for post in feed.json())


def test_reaction_toggle_and_change(client, make_user, make_post):
    author = make_user()
    reader = make_user()
    post = make_post(author)
    url = f"/api/posts/{post['id']}/like"

    first = client.post(url, json={"type": "LIKE"}, headers=reader["headers"])
    assert first.json() == {"liked": True, "type": "LIKE"}

    changed = client.post(url, json={"type": "love"}, headers=reader["headers"])
    assert changed.json() == {"liked": True, "type": "LOVE"}

    feed = client.get("/api/posts", headers=reader["headers"]).json()
    assert feed[0]["likes"] == 1
    assert feed[0]["reactions"] == {"LOVE": 1}
    assert feed[0]["liked"] is True
    assert feed[0]["userReaction"] == "LOVE"

    undone = client.post(url, json={"type": "LOVE"}, headers=reader["headers"])
    assert undone.json() == {"liked": False, "type": None}
    assert client.get("/api/posts").json()[0]["likes"] == 0


def test_reaction_defaults_to_like_without_body(client, make_user, make_post):
    author = make_user()
    post = make_post(author)
    response = client.post(f"/api/posts/{post['id']}/like", headers=author["headers"])
    assert response.json() == {"liked": True, "type": "LIKE"}


def test_reaction_errors(client, make_user, make_post):
    user = make_user()
    post = make_post(user)

    unknown = client.post("/api/posts/nope/like", json={"type": "LIKE"}, headers=user["headers"])
    assert unknown.status_code == 404

    invalid = client.post(f"/api/posts/{post['id']}/like", json={"type": "ANGRY"}, headers=user["headers"])
    assert invalid.status_code == 400


def test_comments_and_post_detail(client, make_user, make_post):
    author = make_user(name="Autor")
    reader = make_user(name="Leitora")
    post = make_post(author)

    response = client.post(
        f"/api/posts/{post['id']}/comments", json={"content": "Parabéns!"}, headers=reader["headers"]
    )
    assert response.status_code == 201
    comment = response.json()
    assert comment["content"] == "Parabéns!"
    assert comment["author"]["name"] == "Leitora"

    detail = client.get(f"/api/posts/{post['id']}").json()
    assert [c["content"] for c in detail["comments"]] == ["Parabéns!"]
    assert client.get("/api/posts").json()[0]["comments"] == 1


def test_comment_on_unknown_post(client, make_user):
    user = make_user()
    response = client.post("/api/posts/missing/comments", json={"content": "oi"}, headers=user["headers"])
    assert response.status_code == 404
    assert response.json() == {"error": "Post not found"}


def test_only_owner_or_admin_can_edit_or_delete(client, admin, make_user, make_post):
    owner = make_user()
    stranger = make_user()
    post = make_post(owner, content="original")

    forbidden = client.put(f"/api/posts/{post['id']}", json={"content": "hack"}, headers=stranger["headers"])
    assert forbidden.status_code == 403
    assert client.delete(f"/api/posts/{post['id']}", headers=stranger["headers"]).status_code == 403

    edited = client.put(f"/api/posts/{post['id']}", json={"content": "editado #novo"}, headers=owner["headers"])
    assert edited.status_code == 200
    assert edited.json()["content"] == "editado #novo"
    assert edited.json()["tags"] == ["novo"]

    deleted = client.delete(f"/api/posts/{post['id']}", headers=admin["headers"])
    assert deleted.status_code == 200
    assert client.get(f"/api/posts/{post['id']}").status_code == 404


def test_deleting_post_removes_comments_and_reactions(client, make_user, make_post):
    owner = make_user()
    reader = make_user()
    post = make_post(owner)
    client.post(f"/api/posts/{post['id']}/like", headers=reader["headers"])
    client.post(f"/api/posts/{post['id']}/comments", json={"content": "oi"}, headers=reader["headers"])

    assert client.delete(f"/api/posts/{post['id']}", headers=owner["headers"]).status_code == 200
    assert client.get("/api/posts").json() == []


def test_professor_post_and_like_flow(client):
    registered = client.post("/api/auth/register", json={
        "name": "Prof", "email": "prof@x.com", "password": "secret123", "role": "PROFESSOR",
    })
    assert registered.status_code == 201

    login = client.post("/api/auth/login", json={"email": "prof@x.com", "password": "secret123"})
    headers = {"Authorization": f"Bearer {login.json()['token']}"}

    created = client.post("/api/posts", json={"content": "Hello"}, headers=headers)
    assert created.status_code == 201

    feed = client.get("/api/posts").json()
    hello = next(post for post in feed if post["id"] == created.json()["id"])
    assert hello["likes"] == 0 and hello["comments"] == 0

    client.post(f"/api/posts/{hello['id']}/like", json={"type": "LIKE"}, headers=headers)
    assert client.get("/api/posts").json()[0]["likes"] == 1

    client.post(f"/api/posts/{hello['id']}/like", json={"type": "LIKE"}, headers=headers)
    assert client.get("/api/posts").json()[0]["likes"] == 0
