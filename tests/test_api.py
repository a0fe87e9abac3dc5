"""HTTP-level tests: status codes, session cookie flow and the end-to-end ownership scenarios."""

import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient
from pydantic import SecretStr
from sqlalchemy.exc import OperationalError

from app.core.config import settings
from app.main import create_app
from tests.support import PASSWORD, add_admin, add_user, login, make_client, make_session_factory


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.session_factory = make_session_factory()
        self.anonymous = make_client(self.session_factory)

    def client_for(self, username: str) -> TestClient:
        return login(make_client(self.session_factory), username)


class TestAuthFlow(ApiTestCase):
    """register -> login -> check-auth -> logout."""

    def test_register_login_logout(self) -> None:
        client = make_client(self.session_factory)
        response = client.post("/register", json={"username": "alice", "password": "secret1"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["user"]["role"], "user")
        self.assertNotIn("password_hash", response.json()["user"])

        self.assertEqual(client.get("/check-auth").json(), {"authenticated": False, "user": None})

        response = client.post("/login", json={"username": "alice", "password": "secret1"})
        self.assertEqual(response.status_code, 200)
        self.assertIn(settings.SESSION_COOKIE_NAME, response.cookies)
        self.assertIn("httponly", response.headers["set-cookie"].lower())

        status = client.get("/check-auth").json()
        self.assertTrue(status["authenticated"])
        self.assertEqual(status["user"]["username"], "alice")

        self.assertEqual(client.post("/logout").status_code, 200)
        self.assertFalse(client.get("/check-auth").json()["authenticated"])

    def test_register_duplicate_and_invalid(self) -> None:
        add_user(self.session_factory, "alice")
        response = self.anonymous.post("/register", json={"username": "alice", "password": "secret1"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "duplicate_username")

        response = self.anonymous.post("/register", json={"username": " ", "password": "123"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(response.json()["errors"]), 2)

    def test_missing_body_fields_are_400(self) -> None:
        response = self.anonymous.post("/register", json={"username": "alice"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "validation_error")

    def test_login_failures_look_the_same(self) -> None:
        add_user(self.session_factory, "alice")
        unknown = self.anonymous.post("/login", json={"username": "ghost", "password": PASSWORD})
        wrong = self.anonymous.post("/login", json={"username": "alice", "password": "wrong-pass"})
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())

    def test_logout_without_session(self) -> None:
        self.assertEqual(self.anonymous.post("/logout").status_code, 200)

    def test_bogus_cookie_is_anonymous(self) -> None:
        self.anonymous.cookies.set(settings.SESSION_COOKIE_NAME, "forged")
        self.assertFalse(self.anonymous.get("/check-auth").json()["authenticated"])
        self.assertEqual(self.anonymous.post("/api/items", json={"name": "X", "category": "Y"}).status_code, 401)

    def test_change_password(self) -> None:
        add_user(self.session_factory, "alice")
        client = self.client_for("alice")
        response = client.post(
            "/change-password",
            json={"current_password": PASSWORD, "new_password": "fresh-pass"},
        )
        self.assertEqual(response.status_code, 200)
        again = make_client(self.session_factory)
        self.assertEqual(
            again.post("/login", json={"username": "alice", "password": "fresh-pass"}).status_code,
            200,
        )
        self.assertEqual(
            self.anonymous.post(
                "/change-password",
                json={"current_password": PASSWORD, "new_password": "fresh-pass"},
            ).status_code,
            401,
        )


class TestItemsScenario(ApiTestCase):
    """alice owns a destination; bob may not change it; alice and an admin may."""

    def test_ownership_scenario(self) -> None:
        alice = make_client(self.session_factory)
        self.assertEqual(
            alice.post("/register", json={"username": "alice", "password": "secret1"}).status_code,
            201,
        )
        login(alice, "alice", "secret1")
        alice_id = alice.get("/check-auth").json()["user"]["id"]

        response = alice.post("/api/items", json={"name": "Paris", "category": "Europe"})
        self.assertEqual(response.status_code, 201)
        item = response.json()
        self.assertEqual(item["owner_id"], alice_id)

        add_user(self.session_factory, "bob")
        bob = self.client_for("bob")
        response = bob.put(f"/api/items/{item['id']}", json={"name": "Hijacked"})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(bob.delete(f"/api/items/{item['id']}").status_code, 403)
        self.assertEqual(self.anonymous.get(f"/api/items/{item['id']}").json()["name"], "Paris")

        response = alice.put(f"/api/items/{item['id']}", json={"name": "Paris, France", "owner_id": 999})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Paris, France")
        self.assertEqual(response.json()["owner_id"], alice_id)

        add_admin(self.session_factory, "root")
        root = self.client_for("root")
        self.assertEqual(root.delete(f"/api/items/{item['id']}").json(), {"message": "Deleted"})
        self.assertEqual(self.anonymous.get(f"/api/items/{item['id']}").status_code, 404)

    def test_status_codes(self) -> None:
        add_user(self.session_factory, "alice")
        alice = self.client_for("alice")
        self.assertEqual(self.anonymous.post("/api/items", json={"name": "X", "category": "Y"}).status_code, 401)
        self.assertEqual(self.anonymous.put("/api/items/1", json={"name": "X"}).status_code, 401)
        self.assertEqual(self.anonymous.delete("/api/items/1").status_code, 401)
        self.assertEqual(self.anonymous.get("/api/items/abc").status_code, 400)
        self.assertEqual(self.anonymous.get("/api/items/123").status_code, 404)
        self.assertEqual(alice.put("/api/items/abc", json={"name": "X"}).status_code, 400)
        self.assertEqual(alice.put("/api/items/123", json={"name": "X"}).status_code, 404)
        self.assertEqual(alice.delete("/api/items/123").status_code, 404)

        response = alice.post("/api/items", json={"name": "", "price": "lots"})
        self.assertEqual(response.status_code, 400)
        fields = {e["field"] for e in response.json()["errors"]}
        self.assertEqual(fields, {"name", "category", "price"})

    def test_body_checked_after_existence_and_ownership(self) -> None:
        add_user(self.session_factory, "alice")
        add_user(self.session_factory, "bob")
        alice = self.client_for("alice")
        bob = self.client_for("bob")
        item_id = alice.post("/api/items", json={"name": "Paris", "category": "Europe"}).json()["id"]

        self.assertEqual(bob.put(f"/api/items/{item_id}", json=[]).status_code, 403)
        self.assertEqual(bob.put(f"/api/items/{item_id}").status_code, 403)
        self.assertEqual(alice.put("/api/items/999", json=[]).status_code, 404)
        self.assertEqual(self.anonymous.post("/api/items", json=[]).status_code, 401)

        response = alice.put(f"/api/items/{item_id}", json=["x"])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "validation_error")
        self.assertEqual(alice.post("/api/items", json=[]).status_code, 400)
        self.assertEqual(alice.post("/api/items").status_code, 400)

    def test_boolean_price_and_rating_rejected(self) -> None:
        add_user(self.session_factory, "alice")
        alice = self.client_for("alice")
        response = alice.post(
            "/api/items",
            json={"name": "X", "category": "Y", "price": True, "rating": False},
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual({e["field"] for e in response.json()["errors"]}, {"price", "rating"})
        self.assertEqual(self.anonymous.get("/api/items").json(), [])

    def test_list_query_parameters(self) -> None:
        add_user(self.session_factory, "alice")
        alice = self.client_for("alice")
        for name, category, rating in (("Rome", "Europe", 5), ("Bali", "Asia", 4), ("Oslo", "Europe", 3)):
            alice.post("/api/items", json={"name": name, "category": category, "rating": rating})

        everything = self.anonymous.get("/api/items")
        self.assertEqual(everything.status_code, 200)
        self.assertEqual(len(everything.json()), 3)

        response = self.anonymous.get("/api/items", params={"category": "Europe", "sort": "rating", "fields": "name,rating"})
        self.assertEqual(response.json(), [{"name": "Oslo", "rating": 3.0}, {"name": "Rome", "rating": 5.0}])


class TestAdminScenario(ApiTestCase):
    """promote/demote: admin only, no self-demotion, never zero admins."""

    def test_promote_and_demote(self) -> None:
        add_admin(self.session_factory, "root")
        add_user(self.session_factory, "alice")
        add_user(self.session_factory, "bob")
        root = self.client_for("root")
        alice = self.client_for("alice")

        self.assertEqual(self.anonymous.post("/admin/promote", json={"username": "bob"}).status_code, 401)
        self.assertEqual(alice.post("/admin/promote", json={"username": "bob"}).status_code, 403)

        response = root.post("/admin/promote", json={"username": "bob"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "admin")

        self.assertEqual(root.post("/admin/promote", json={"username": "ghost"}).status_code, 404)

        response = root.post("/admin/demote", json={"username": "bob"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "user")

        response = root.post("/admin/demote", json={"username": "root"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "self_demotion")

        self.assertEqual(root.post("/admin/demote", json={"username": "ghost"}).status_code, 404)
        self.assertEqual(alice.post("/admin/demote", json={"username": "root"}).status_code, 403)

    def test_demoted_admin_loses_access(self) -> None:
        add_admin(self.session_factory, "root")
        add_admin(self.session_factory, "bob")
        root = self.client_for("root")
        bob = self.client_for("bob")
        self.assertEqual(root.post("/admin/demote", json={"username": "bob"}).status_code, 200)
        self.assertEqual(bob.get("/admin/users").status_code, 403)

    def test_admin_user_list(self) -> None:
        add_admin(self.session_factory, "root")
        add_user(self.session_factory, "alice")
        root = self.client_for("root")
        users = root.get("/admin/users").json()["users"]
        self.assertEqual([u["username"] for u in users], ["root", "alice"])
        self.assertEqual(self.anonymous.get("/admin/users").status_code, 401)


class TestServiceRoutes(ApiTestCase):
    """health, info and the JSON 404 for unknown API paths."""

    def test_health(self) -> None:
        body = self.anonymous.get("/api/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["database"], "connected")

    def test_health_reports_app_settings(self) -> None:
        prod = settings.model_copy(update={"APP_ENV": "prod"})
        client = make_client(self.session_factory, settings=prod)
        self.assertEqual(client.get("/api/health").json()["environment"], "prod")

    def test_info(self) -> None:
        body = self.anonymous.get("/api/info").json()
        self.assertIn("/api/items", body["routes"])

    def test_unknown_api_route(self) -> None:
        response = self.anonymous.get("/api/nope")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "API route not found")


class TestStartup(unittest.TestCase):
    """The lifespan hook creates the bootstrap admin and refuses to start without a database."""

    def test_bootstrap_admin_on_startup(self) -> None:
        session_factory = make_session_factory()
        configured = settings.model_copy(
            update={"ADMIN_USERNAME": "boss", "ADMIN_PASSWORD": SecretStr("boss-pass")}
        )
        with TestClient(create_app(settings=configured, session_factory=session_factory)):
            pass
        client = make_client(session_factory)
        response = client.post("/login", json={"username": "boss", "password": "boss-pass"})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "admin")

    def test_unreachable_database_is_fatal(self) -> None:
        broken = MagicMock()
        broken.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        app = create_app(session_factory=lambda: broken)
        with self.assertRaises(RuntimeError):
            with TestClient(app):
                pass
        broken.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
