import os

from app.core.config import settings
from app.db.session import DatabaseHealth
from app.deps import get_db_health
from app.main import app

API = settings.API_V1_STR


def _register(client, username="grokfan", email="grokfan@memehub.io", password="secret123"):
    return client.post(
        f"{API}/auth/register",
        json={"username": username, "email": email, "password": password},
    )


def test_register_then_login(client):
    registered = _register(client)
    assert registered.status_code == 201
    body = registered.json()
    assert body["user"]["username"] == "grokfan"
    assert body["access_token"]

    login = client.post(
        f"{API}/auth/login",
        json={"email": "  GrokFan@MemeHub.io ", "password": "secret123"},
    )
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get(f"{API}/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "grokfan@memehub.io"


def test_duplicate_registration_conflicts(client):
    assert _register(client).status_code == 201

    again = _register(client, username="someone-else")

    assert again.status_code == 409
    assert again.json() == {"error": "Username or email already exists"}


def test_login_with_wrong_password(client):
    _register(client)

    response = client.post(f"{API}/auth/login", json={"email": "grokfan@memehub.io", "password": "nope123"})

    assert response.status_code == 401
    assert "error" in response.json()


def test_bad_request_body_is_a_400(client):
    response = client.post(f"{API}/auth/register", json={"username": "ab"})

    assert response.status_code == 400
    assert "error" in response.json()


def test_protected_route_requires_token(client):
    assert client.get(f"{API}/memes/my-memes").status_code == 401
    assert client.get(
        f"{API}/memes/my-memes", headers={"Authorization": "Bearer not-a-token"}
    ).status_code == 401


def test_set_location_and_nearby(client, make_user, make_meme, auth_headers):
    viewer = make_user()
    meme = make_meme(make_user(lat=0.0, lon=0.0899))
    headers = auth_headers(viewer)

    before = client.get(f"{API}/memes/nearby", headers=headers)
    assert before.status_code == 400
    assert before.json() == {"error": "User location not set"}

    located = client.put(f"{API}/auth/location", json={"latitude": 0, "longitude": 0}, headers=headers)
    assert located.status_code == 200

    inside = client.get(f"{API}/memes/nearby", params={"radius": 10}, headers=headers).json()
    assert [m["id"] for m in inside["memes"]] == [meme.id]
    assert inside["memes"][0]["distance_km"] > 9

    outside = client.get(f"{API}/memes/nearby", params={"radius": 9}, headers=headers).json()
    assert outside == {"memes": [], "count": 0}


def test_invalid_coordinates(client, make_user, auth_headers):
    response = client.put(
        f"{API}/auth/location",
        json={"latitude": 91, "longitude": 0},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid coordinates"}


def test_upload_with_image_url(client, make_user, auth_headers):
    response = client.post(
        f"{API}/memes",
        data={
            "title": "Grok on Mars",
            "caption": "one small step",
            "category": "xAI",
            "image_url": "https://img.memehub.io/mars.png",
        },
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 201
    meme = response.json()["meme"]
    assert meme["image_url"] == "https://img.memehub.io/mars.png"
    assert meme["category"] == "xAI"


def test_upload_with_file_then_delete(client, make_user, auth_headers):
    uploader = make_user()
    headers = auth_headers(uploader)

    response = client.post(
        f"{API}/memes",
        data={"title": "robots", "caption": "beep", "category": "AI"},
        files={"image": ("robot.png", b"\x89PNG fake bytes", "image/png")},
        headers=headers,
    )
    assert response.status_code == 201
    image_url = response.json()["meme"]["image_url"]
    assert image_url.startswith("/uploads/") and image_url.endswith(".png")
    stored_file = os.path.join(settings.UPLOAD_DIRECTORY, image_url[len("/uploads/"):])
    assert os.path.exists(stored_file)

    meme_id = response.json()["meme"]["id"]
    assert client.delete(f"{API}/memes/{meme_id}", headers=headers).status_code == 200
    assert not os.path.exists(stored_file)


def test_upload_rejections(client, make_user, auth_headers):
    headers = auth_headers(make_user())
    base = {"title": "t", "caption": "c", "category": "AI"}

    no_image = client.post(f"{API}/memes", data=base, headers=headers)
    long_caption = client.post(
        f"{API}/memes", data={**base, "caption": "x" * 141, "image_url": "http://x/y.png"}, headers=headers,
    )
    bad_file = client.post(
        f"{API}/memes", data=base, files={"image": ("notes.txt", b"hello", "text/plain")}, headers=headers,
    )

    assert no_image.status_code == 400
    assert long_caption.json() == {"error": "Caption must be 140 characters or less"}
    assert bad_file.status_code == 400


def test_feed_endpoints(client, make_user, make_meme, add_reactions, auth_headers):
    me = make_user()
    mine = make_meme(me, title="my grok meme", category="Grok")
    other = make_meme(make_user(), title="futuristic cat", category="Futuristic")
    add_reactions(other, [me, make_user()])

    feed = client.get(f"{API}/memes").json()
    assert feed["count"] == 2
    assert [m["id"] for m in feed["memes"]] == [other.id, mine.id]

    trending = client.get(f"{API}/memes", params={"sort": "trending"}).json()
    assert trending["memes"][0]["reaction_count"] == 2

    searched = client.get(f"{API}/memes", params={"search": "GROK", "category": "Grok"}).json()
    assert [m["id"] for m in searched["memes"]] == [mine.id]

    assert client.get(f"{API}/memes/trending").json()["memes"][0]["id"] == other.id

    my_memes = client.get(f"{API}/memes/my-memes", headers=auth_headers(me)).json()
    assert [m["id"] for m in my_memes["memes"]] == [mine.id]

    single = client.get(f"{API}/memes/{other.id}").json()
    assert single["reaction_count"] == 2
    assert client.get(f"{API}/memes/9999").status_code == 404


def test_feed_limit_out_of_range(client):
    assert client.get(f"{API}/memes", params={"limit": 0}).status_code == 400


def test_meme_update_and_ownership(client, make_user, make_meme, auth_headers):
    owner = make_user()
    meme = make_meme(owner, title="before")

    foreign = client.put(f"{API}/memes/{meme.id}", json={"title": "x"}, headers=auth_headers(make_user()))
    assert foreign.status_code == 404
    assert foreign.json() == {"error": "Meme not found or unauthorized"}

    empty = client.put(f"{API}/memes/{meme.id}", json={}, headers=auth_headers(owner))
    assert empty.json() == {"error": "No fields to update"}

    ok = client.put(f"{API}/memes/{meme.id}", json={"title": "after"}, headers=auth_headers(owner))
    assert ok.status_code == 200
    assert client.get(f"{API}/memes/{meme.id}").json()["title"] == "after"


def test_reaction_lifecycle(client, make_user, make_meme, auth_headers):
    fan = make_user()
    headers = auth_headers(fan)
    meme = make_meme(make_user())
    url = f"{API}/memes/{meme.id}/reactions"

    first = client.post(url, json={"reaction_type": "laugh"}, headers=headers)
    second = client.post(url, json={"reaction_type": "robot"}, headers=headers)
    assert (first.status_code, second.status_code) == (201, 200)
    reaction_id = first.json()["reaction"]["id"]
    assert second.json()["reaction"]["id"] == reaction_id

    listing = client.get(url).json()
    assert listing["counts"] == {"laugh": 0, "robot": 1, "think": 0, "total": 1}
    assert listing["reactions"][0]["username"] == fan.username

    stranger = auth_headers(make_user())
    assert client.put(
        f"{API}/memes/reactions/{reaction_id}", json={"reaction_type": "think"}, headers=stranger
    ).status_code == 404
    assert client.delete(f"{API}/memes/reactions/{reaction_id}", headers=stranger).status_code == 404

    changed = client.put(f"{API}/memes/reactions/{reaction_id}", json={"reaction_type": "think"}, headers=headers)
    assert changed.json()["reaction"]["reaction_type"] == "think"

    assert client.delete(f"{API}/memes/reactions/{reaction_id}", headers=headers).status_code == 200
    assert client.get(url).json()["counts"]["total"] == 0


def test_reaction_errors(client, make_user, make_meme, auth_headers):
    headers = auth_headers(make_user())
    meme = make_meme(make_user())

    bad_type = client.post(f"{API}/memes/{meme.id}/reactions", json={"reaction_type": "love"}, headers=headers)
    missing = client.post(f"{API}/memes/9999/reactions", json={"reaction_type": "laugh"}, headers=headers)

    assert bad_type.status_code == 400
    assert bad_type.json() == {"error": "Invalid reaction type"}
    assert missing.status_code == 404
    assert missing.json() == {"error": "Meme not found"}


def test_storage_failure_is_a_503(client, engine):
    from app.db.base import Base

    Base.metadata.drop_all(bind=engine)
    try:
        response = client.get(f"{API}/memes")
    finally:
        Base.metadata.create_all(bind=engine)

    assert response.status_code == 503
    assert response.json() == {"error": "Failed to fetch memes"}


def test_health_reports_database_state(client):
    class DownDatabase(DatabaseHealth):
        def is_available(self):
            return False

    assert client.get(f"{API}/health").json()["status"] == "OK"

    app.dependency_overrides[get_db_health] = lambda: DownDatabase(None)
    degraded = client.get(f"{API}/health").json()

    assert degraded["status"] == "DEGRADED"
    assert degraded["database"] == "unavailable"


def test_unknown_route_uses_error_body(client):
    response = client.get(f"{API}/does-not-exist")

    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


def test_large_limits_are_passed_through(client, make_user, make_meme):
    uploader = make_user()
    for _ in range(3):
        make_meme(uploader)

    feed = client.get(f"{API}/memes", params={"limit": 1000})
    trending = client.get(f"{API}/memes/trending", params={"limit": 1000})

    assert feed.status_code == 200
    assert feed.json()["count"] == 3
    assert trending.status_code == 200


def test_local_image_url_cannot_be_claimed(client, make_user, auth_headers):
    outside = os.path.join(os.path.dirname(os.path.realpath(settings.UPLOAD_DIRECTORY)), "keep-me.txt")
    with open(outside, "w") as fh:
        fh.write("important")
    try:
        response = client.post(
            f"{API}/memes",
            data={
                "title": "t",
                "caption": "c",
                "category": "AI",
                "image_url": "/uploads/../keep-me.txt",
            },
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 400
        assert os.path.exists(outside)
    finally:
        os.remove(outside)


def test_deleting_meme_never_touches_files_outside_uploads(client, db, make_user, make_meme, auth_headers):
    outside = os.path.join(os.path.dirname(os.path.realpath(settings.UPLOAD_DIRECTORY)), "keep-me-too.txt")
    with open(outside, "w") as fh:
        fh.write("important")
    uploader = make_user()
    meme = make_meme(uploader)
    meme.image_url = "/uploads/../keep-me-too.txt"
    db.commit()
    try:
        response = client.delete(f"{API}/memes/{meme.id}", headers=auth_headers(uploader))

        assert response.status_code == 200
        assert os.path.exists(outside)
    finally:
        os.remove(outside)


def test_failed_insert_removes_saved_image(client, make_user, auth_headers, monkeypatch):
    from app.core.errors import StorageFault
    from app.modules.memes.api import router as memes_router_module

    def broken_create_meme(db, meme_in, uploader_id):
        raise StorageFault("Failed to upload meme")

    monkeypatch.setattr(memes_router_module, "create_meme", broken_create_meme)
    before = set(os.listdir(settings.UPLOAD_DIRECTORY))

    response = client.post(
        f"{API}/memes",
        data={"title": "t", "caption": "c", "category": "AI"},
        files={"image": ("x.png", b"\x89PNG fake bytes", "image/png")},
        headers=auth_headers(make_user()),
    )

    assert response.status_code == 503
    assert set(os.listdir(settings.UPLOAD_DIRECTORY)) == before
