"""
HTTP-level tests for the MealLog API.

Routes run against the per-test SQLite session and temporary blob store
wired in by the api_client fixture.
"""

from datetime import datetime

import pytest

from adapters.blob_store import LocalBlobStore
from api.dependencies import SESSION_COOKIE, get_blob_store
from domain.enums import UserRole, Visibility
from domain.models import Meal
from main import app
from test_fixtures import make_image_bytes, make_meal, make_user, store_image


def login(client, user):
    client.cookies.set(SESSION_COOKIE, str(user.user_id))
    return client


def meal_payload(**overrides):
    payload = {
        "name": "Pad thai",
        "meal_date": "2026-10-01T12:30:00",
        "category": "lunch",
        "location": "Soi 38",
        "rating": 4.5,
        "visibility": "private",
    }
    payload.update(overrides)
    return payload


def test_health_check(api_client):
    response = api_client.get("/health-check")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


class TestUpload:
    def test_requires_login(self, api_client):
        response = api_client.post(
            "/upload", files={"file": ("meal.png", make_image_bytes(), "image/png")}
        )

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "UNAUTHORIZED"

    def test_png_upload_returns_jpeg_path(self, api_client, db_session, blob_store):
        login(api_client, make_user(db_session))

        response = api_client.post(
            "/upload", files={"file": ("meal.png", make_image_bytes(800, 600), "image/png")}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Upload successful"
        assert body["path"].startswith("/uploads/meals/")
        assert body["path"].endswith(".jpg")
        assert blob_store.exists(blob_store.key_for(body["path"]))

    def test_missing_file_is_rejected(self, api_client, db_session):
        login(api_client, make_user(db_session))

        response = api_client.post("/upload")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "NO_FILE"

    @pytest.mark.parametrize(
        "filename,data,code",
        [
            ("anim.gif", make_image_bytes(fmt="GIF"), "UNSUPPORTED_TYPE"),
            ("notes.jpg", b"definitely not pixels", "INVALID_IMAGE"),
        ],
    )
    def test_bad_uploads_are_rejected(self, api_client, db_session, blob_store, filename, data, code):
        login(api_client, make_user(db_session))

        response = api_client.post("/upload", files={"file": (filename, data)})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == code
        assert not blob_store.root.exists() or not any(blob_store.root.iterdir())

    def test_oversized_upload_is_rejected(self, api_client, db_session, blob_store):
        login(api_client, make_user(db_session))

        response = api_client.post(
            "/upload", files={"file": ("huge.jpg", b"\0" * (11 * 1024 * 1024), "image/jpeg")}
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "PAYLOAD_TOO_LARGE"
        assert not blob_store.root.exists() or not any(blob_store.root.iterdir())

    def test_storage_failure_is_server_error(self, api_client, db_session, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        app.dependency_overrides[get_blob_store] = lambda: LocalBlobStore(blocker / "meals")
        login(api_client, make_user(db_session))

        response = api_client.post(
            "/upload", files={"file": ("meal.png", make_image_bytes(), "image/png")}
        )

        assert response.status_code == 500
        assert response.json()["error"]["code"] == "STORAGE_WRITE_ERROR"


class TestMeals:
    def test_requires_login(self, api_client):
        assert api_client.post("/meals", json=meal_payload()).status_code == 401
        assert api_client.get("/meals").status_code == 401

    def test_create_and_list(self, api_client, db_session, blob_store):
        login(api_client, make_user(db_session))
        path = store_image(blob_store, "x.jpg")

        created = api_client.post("/meals", json=meal_payload(image=path))
        listed = api_client.get("/meals")

        assert created.status_code == 201
        assert created.json()["image"] == path
        assert [m["name"] for m in listed.json()] == ["Pad thai"]

    def test_blank_name_fails_validation(self, api_client, db_session):
        login(api_client, make_user(db_session))

        response = api_client.post("/meals", json=meal_payload(name=""))

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_upload_then_replace_photo(self, api_client, db_session, blob_store):
        login(api_client, make_user(db_session))
        first = api_client.post(
            "/upload", files={"file": ("a.png", make_image_bytes(), "image/png")}
        ).json()["path"]
        meal = api_client.post("/meals", json=meal_payload(image=first)).json()
        second = api_client.post(
            "/upload", files={"file": ("b.webp", make_image_bytes(fmt="WEBP"), "image/webp")}
        ).json()["path"]

        response = api_client.put(f"/meals/{meal['meal_id']}", json=meal_payload(image=second))

        assert response.status_code == 200
        assert response.json()["image"] == second
        assert not blob_store.exists(blob_store.key_for(first))
        assert blob_store.exists(blob_store.key_for(second))

    def test_delete_removes_photo(self, api_client, db_session, blob_store):
        user = make_user(db_session)
        meal = make_meal(db_session, user, image=store_image(blob_store, "dinner.jpg"))
        meal_id = meal.meal_id
        login(api_client, user)

        response = api_client.delete(f"/meals/{meal_id}")

        assert response.status_code == 200
        assert response.json()["deleted"] == meal_id
        assert not blob_store.exists("dinner.jpg")

    def test_other_users_cannot_modify(self, api_client, db_session, blob_store):
        owner = make_user(db_session)
        meal = make_meal(db_session, owner, image=store_image(blob_store, "mine.jpg"))
        login(api_client, make_user(db_session))

        assert api_client.delete(f"/meals/{meal.meal_id}").status_code == 403
        assert api_client.put(f"/meals/{meal.meal_id}", json=meal_payload()).status_code == 403
        assert blob_store.exists("mine.jpg")

    def test_cannot_attach_someone_elses_photo(self, api_client, db_session, blob_store):
        path = store_image(blob_store, "theirs.jpg")
        make_meal(db_session, make_user(db_session), image=path)
        login(api_client, make_user(db_session))

        response = api_client.post("/meals", json=meal_payload(image=path))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "IMAGE_IN_USE"
        assert blob_store.exists("theirs.jpg")

    def test_cannot_attach_missing_photo(self, api_client, db_session):
        login(api_client, make_user(db_session))

        response = api_client.post("/meals", json=meal_payload(image="/uploads/meals/nope.jpg"))

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "IMAGE_NOT_FOUND"

    def test_private_meal_is_hidden_from_others(self, api_client, db_session):
        meal = make_meal(db_session, make_user(db_session), visibility=Visibility.PRIVATE)
        login(api_client, make_user(db_session))

        response = api_client.get(f"/meals/{meal.meal_id}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"


class TestSearch:
    @pytest.fixture
    def diary(self, db_session):
        user = make_user(db_session, "diarist")
        make_meal(db_session, user, name="Beef noodles", category="lunch", location="Noodle Bar",
                  rating=4.0, meal_date=datetime(2026, 10, 5, 12, 0))
        make_meal(db_session, user, name="Porridge", category="breakfast", location="Home",
                  rating=3.0, meal_date=datetime(2026, 10, 3, 8, 0))
        make_meal(db_session, user, name="Hotpot", category="dinner", location="Old Town",
                  rating=5.0, meal_date=datetime(2026, 10, 3, 23, 30))
        make_meal(db_session, user, name="Toast", category="breakfast", location="Home",
                  rating=2.0, meal_date=datetime(2026, 9, 28, 7, 0))
        make_meal(db_session, make_user(db_session), name="Noodle soup")
        return user

    def _search(self, client, **params):
        response = client.get("/meals/search", params=params)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["count"] == len(body["results"])
        return [m["name"] for m in body["results"]]

    def test_requires_login(self, api_client):
        assert api_client.get("/meals/search").status_code == 401

    def test_no_filters_returns_own_meals_newest_first(self, api_client, diary):
        login(api_client, diary)

        assert self._search(api_client) == ["Beef noodles", "Hotpot", "Porridge", "Toast"]

    def test_keyword_matches_name_or_location(self, api_client, diary):
        login(api_client, diary)

        assert self._search(api_client, keyword="noodle") == ["Beef noodles"]
        assert self._search(api_client, keyword="town") == ["Hotpot"]

    def test_end_date_includes_the_whole_day(self, api_client, diary):
        login(api_client, diary)

        names = self._search(api_client, start_date="2026-10-03", end_date="2026-10-03")

        assert names == ["Hotpot", "Porridge"]

    def test_category_rating_and_location_filters(self, api_client, diary):
        login(api_client, diary)

        assert self._search(api_client, category="breakfast") == ["Porridge", "Toast"]
        assert self._search(api_client, min_rating=3, max_rating=4) == ["Beef noodles", "Porridge"]
        assert self._search(api_client, location="Home", min_rating=2.5) == ["Porridge"]

    def test_invalid_date_fails_validation(self, api_client, diary):
        login(api_client, diary)

        assert api_client.get("/meals/search", params={"start_date": "soon"}).status_code == 422


class TestExplore:
    @pytest.fixture
    def feed(self, db_session):
        owner = make_user(db_session, "chef")
        make_meal(db_session, owner, name="public", visibility=Visibility.ALL, days_ago=0)
        make_meal(db_session, owner, name="members", visibility=Visibility.MEMBER, days_ago=1)
        make_meal(db_session, owner, name="secret", visibility=Visibility.PRIVATE, days_ago=2)
        return owner

    def test_guest_sees_public_meals_only(self, api_client, feed):
        response = api_client.get("/explore")

        assert response.status_code == 200
        assert [(m["name"], m["username"]) for m in response.json()] == [("public", "chef")]

    def test_member_sees_member_meals(self, api_client, db_session, feed):
        login(api_client, make_user(db_session))

        names = [m["name"] for m in api_client.get("/explore").json()]

        assert names == ["public", "members"]


class TestAdmin:
    def test_lists_users_without_credentials(self, api_client, db_session):
        admin = make_user(db_session, "root", UserRole.ADMIN)
        make_user(db_session, "alice")
        login(api_client, admin)

        response = api_client.get("/admin/users")

        assert response.status_code == 200
        users = response.json()
        assert [(u["username"], u["role"]) for u in users] == [("root", "admin"), ("alice", "user")]
        assert set(users[0]) == {"user_id", "username", "role", "created_at"}

    def test_listing_requires_admin(self, api_client, db_session):
        login(api_client, make_user(db_session))

        assert api_client.get("/admin/users").status_code == 403

    def test_non_admin_is_forbidden(self, api_client, db_session):
        victim = make_user(db_session)
        login(api_client, make_user(db_session))

        response = api_client.delete(f"/admin/users/{victim.user_id}")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    def test_admin_deletes_user_meals_and_photos(self, api_client, db_session, blob_store):
        admin = make_user(db_session, "root", UserRole.ADMIN)
        victim = make_user(db_session, "victim")
        victim_id = victim.user_id
        make_meal(db_session, victim, image=store_image(blob_store, "one.jpg"))
        make_meal(db_session, victim, image="/uploads/meals/already-gone.jpg")
        make_meal(db_session, victim)
        login(api_client, admin)

        response = api_client.delete(f"/admin/users/{victim_id}")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ok",
            "deleted": victim_id,
            "meals_deleted": 3,
            "images_released": 2,
        }
        assert not blob_store.exists("one.jpg")
        assert db_session.query(Meal).count() == 0

    def test_admin_cannot_delete_self(self, api_client, db_session):
        admin = make_user(db_session, "root", UserRole.ADMIN)
        login(api_client, admin)

        response = api_client.delete(f"/admin/users/{admin.user_id}")

        assert response.status_code == 400

    def test_unknown_user_is_not_found(self, api_client, db_session):
        login(api_client, make_user(db_session, "root", UserRole.ADMIN))

        assert api_client.delete("/admin/users/99999").status_code == 404
