import unittest
from unittest.mock import patch

from taskhub.auth.token_service import TokenKind
from tests.helpers import ApiTestCase


class TestRegister(ApiTestCase):
    def test_register_defaults_to_user_role(self):
        response = self.client.post(
            "/auth/register", json={"username": "a", "email": "a@x.com", "password": "pw123456"}
        )
        self.assertEqual(response.status_code, 201)
        user = response.json()["user"]
        self.assertEqual(user["username"], "a")
        self.assertEqual(user["email"], "a@x.com")
        self.assertEqual(user["role"], "user")
        self.assertNotIn("password", user)

    def test_register_admin(self):
        user = self.register("boss", "boss@x.com", role="admin")
        self.assertEqual(user["role"], "admin")

    def test_register_unknown_role(self):
        response = self.client.post(
            "/auth/register",
            json={"username": "a", "email": "a@x.com", "password": "pw123456", "role": "root"},
        )
        self.assertEqual(response.status_code, 400)

    def test_register_missing_fields(self):
        for body in [{"email": "a@x.com", "password": "pw"}, {"username": "a", "email": "", "password": "pw"}, {}]:
            response = self.client.post("/auth/register", json=body)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["detail"], "All fields are required")

    def test_register_duplicate_email(self):
        self.register("a", "a@x.com")
        response = self.client.post(
            "/auth/register", json={"username": "b", "email": "a@x.com", "password": "other123"}
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "User already exists")

    def test_register_race_on_unique_email(self):
        self.register("a", "a@x.com")
        # both sign-ups passed the lookup; the unique index decides
        with patch("taskhub.services.user_service.get_user_by_email", return_value=None):
            response = self.client.post(
                "/auth/register", json={"username": "b", "email": "a@x.com", "password": "other123"}
            )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "User already exists")
        self.register("c", "c@x.com")


class TestLogin(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.register("a", "a@x.com")

    def test_login_returns_access_token_and_cookie(self):
        response = self.client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["token_type"], "bearer")
        self.assertEqual(body["user"], self.user)
        self.assertNotIn("refresh_token", body)

        tokens = self.app.state.token_service
        self.assertEqual(tokens.verify(TokenKind.access, body["access_token"]).subject_id, self.user["id"])
        refresh = response.cookies.get("refresh_token")
        self.assertEqual(tokens.verify(TokenKind.refresh, refresh).subject_id, self.user["id"])

        cookie = response.headers["set-cookie"]
        self.assertIn("HttpOnly", cookie)
        self.assertIn("SameSite=strict", cookie)

    def test_wrong_password(self):
        response = self.client.post("/auth/login", json={"email": "a@x.com", "password": "wrong"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid credentials")
        self.assertNotIn("set-cookie", response.headers)

    def test_unknown_user(self):
        response = self.client.post("/auth/login", json={"email": "b@x.com", "password": "pw123456"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "User does not exist")

    def test_missing_fields(self):
        response = self.client.post("/auth/login", json={"email": "a@x.com"})
        self.assertEqual(response.status_code, 400)


class TestRefreshAndLogout(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.register("a", "a@x.com")

    def test_login_then_refresh_gives_usable_access_token(self):
        self.login("a@x.com")
        response = self.client.post("/auth/refresh")
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["user"]["id"], self.user["id"])

        me = self.client.get("/users/me", headers=self.auth(body["access_token"]))
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["email"], "a@x.com")

    def test_refresh_without_cookie(self):
        response = self.client.post("/auth/refresh")
        self.assertEqual(response.status_code, 401)

    def test_refresh_after_account_deleted(self):
        token = self.login("a@x.com")
        self.assertEqual(self.client.delete("/users/me", headers=self.auth(token)).status_code, 200)
        response = self.client.post("/auth/refresh")
        self.assertEqual(response.status_code, 401)

    def test_deleted_account_does_not_pass_to_next_signup(self):
        token = self.login("a@x.com")
        self.client.post("/tasks", json={"title": "t", "description": "d"}, headers=self.auth(token))
        self.assertEqual(self.client.delete("/users/me", headers=self.auth(token)).status_code, 200)

        newcomer = self.register("b", "b@x.com")
        self.assertNotEqual(newcomer["id"], self.user["id"])

        # the client still carries the deleted account's refresh cookie
        self.assertEqual(self.client.post("/auth/refresh").status_code, 401)
        me = self.client.get("/users/me", headers=self.auth(token))
        self.assertEqual(me.status_code, 404)
        self.assertNotIn("username", me.json())

        newcomer_token = self.login("b@x.com")
        self.assertEqual(self.client.get("/tasks", headers=self.auth(newcomer_token)).json(), [])

    def test_logout_clears_cookie(self):
        token = self.login("a@x.com")
        response = self.client.post("/auth/logout", headers=self.auth(token))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"], {"id": self.user["id"], "role": "user"})
        self.assertIn("Max-Age=0", response.headers["set-cookie"])

    def test_logout_without_identity(self):
        response = self.client.post("/auth/logout")
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json()["user"])


class TestAccessGate(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.register("a", "a@x.com")

    def test_missing_header(self):
        response = self.client.get("/users/me")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "No token provided")
        self.assertEqual(response.headers["www-authenticate"], "Bearer")

    def test_garbage_token(self):
        response = self.client.get("/users/me", headers=self.auth("not-a-token"))
        self.assertEqual(response.status_code, 401)

    def test_wrong_scheme(self):
        token = self.login("a@x.com")
        response = self.client.get("/users/me", headers={"Authorization": f"Basic {token}"})
        self.assertEqual(response.status_code, 401)

    def test_refresh_token_is_not_an_access_token(self):
        self.client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
        refresh = self.client.cookies.get("refresh_token")
        response = self.client.get("/users/me", headers=self.auth(refresh))
        self.assertEqual(response.status_code, 401)

    def test_non_admin_forbidden(self):
        token = self.login("a@x.com")
        response = self.client.get("/users", headers=self.auth(token))
        self.assertEqual(response.status_code, 403)


class TestExpiredAccessToken(ApiTestCase):
    settings_overrides = {"ACCESS_TOKEN_EXPIRE_MINUTES": -1}

    def test_expired_access_token_rejected(self):
        self.register("a", "a@x.com")
        token = self.login("a@x.com")
        response = self.client.get("/users/me", headers=self.auth(token))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["detail"], "Invalid or expired token")


class TestProductionCookie(ApiTestCase):
    settings_overrides = {"ENVIRONMENT": "production"}

    def test_cookie_is_secure(self):
        self.register("a", "a@x.com")
        response = self.client.post("/auth/login", json={"email": "a@x.com", "password": "pw123456"})
        self.assertIn("Secure", response.headers["set-cookie"])


if __name__ == "__main__":
    unittest.main()
