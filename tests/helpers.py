import unittest

from fastapi.testclient import TestClient
from sqlmodel import Session

from taskhub.configs import Settings
from taskhub.configs.database import init_db, make_engine
from taskhub.main import create_app


def make_settings(**overrides) -> Settings:
    values = dict(
        DATABASE_URL="sqlite://",
        JWT_ACCESS_SECRET="test-access-secret",
        JWT_REFRESH_SECRET="test-refresh-secret",
        BCRYPT_ROUNDS=4,
        ENVIRONMENT="development",
        LOG_LEVEL="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory database and session for service level tests."""

    def setUp(self):
        self.settings = make_settings()
        self.engine = make_engine(self.settings)
        init_db(self.engine)
        self.db = Session(self.engine)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()


class ApiTestCase(unittest.TestCase):
    """Application wired against its own in-memory database."""

    settings_overrides = {}

    def setUp(self):
        self.settings = make_settings(**self.settings_overrides)
        self.app = create_app(self.settings)
        init_db(self.app.state.engine)
        self.client = TestClient(self.app)

    def tearDown(self):
        self.client.close()
        self.app.state.engine.dispose()

    def register(self, username, email, password="pw123456", role=None):
        body = {"username": username, "email": email, "password": password}
        if role:
            body["role"] = role
        response = self.client.post("/auth/register", json=body)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["user"]

    def login(self, email, password="pw123456"):
        response = self.client.post("/auth/login", json={"email": email, "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["access_token"]

    def auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    def make_user(self, username, role=None):
        """Registers and logs in a user, returns (user, auth headers)."""
        email = f"{username}@x.com"
        user = self.register(username, email, role=role)
        return user, self.auth(self.login(email))
