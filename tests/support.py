"""Shared fixtures: in-memory SQLite database and an API client bound to it."""

import unittest
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.database import create_db_engine, get_db
from app.main import app
from app.models import Base

API = settings.API_PREFIX
IMAGE_URL = "https://storage.test/storage/v1/object/public/blog/posts/1_cat.png"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
ADMIN_PASSWORD = "Abcdef12"
USER_PASSWORD = "Reader123"


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory database per test, with cheap bcrypt rounds."""

    def setUp(self) -> None:
        self.engine = create_db_engine("sqlite://", poolclass=StaticPool)
        Base.metadata.create_all(self.engine)
        self.SessionTesting = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionTesting()
        self.addCleanup(self.engine.dispose)
        self.addCleanup(self.db.close)

        rounds = patch.object(settings, "BCRYPT_ROUNDS", 4)
        rounds.start()
        self.addCleanup(rounds.stop)


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose get_db yields sessions on the test database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.addCleanup(app.dependency_overrides.clear)
        self.client = TestClient(app)

    @staticmethod
    def auth(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    def signup(
        self,
        username: str = "ab_1",
        password: str = ADMIN_PASSWORD,
        firstname: str = "A",
        lastname: str = "B",
        admin: bool = True,
    ):
        path = "/admin/signup" if admin else "/signup"
        return self.client.post(
            f"{API}{path}",
            json={
                "firstname": firstname,
                "lastname": lastname,
                "username": username,
                "password": password,
                "confirmpassword": password,
            },
        )

    def login(self, username: str, password: str, admin: bool = True):
        path = "/admin/login" if admin else "/login"
        return self.client.post(
            f"{API}{path}",
            json={"username": username, "password": password},
        )

    def admin_token(self, username: str = "ab_1", **profile: str) -> str:
        self.assertEqual(self.signup(username=username, **profile).status_code, 201)
        return self.login(username, ADMIN_PASSWORD).json()["token"]

    def user_token(self, username: str = "reader", **profile: str) -> str:
        resp = self.signup(username=username, password=USER_PASSWORD, admin=False, **profile)
        self.assertEqual(resp.status_code, 201)
        return self.login(username, USER_PASSWORD, admin=False).json()["token"]

    def create_post(
        self,
        token: str,
        title: str = "Hi",
        content: str = "Hello world",
        published: str = "false",
        image: tuple | None = ("cat.png", PNG_BYTES, "image/png"),
    ):
        files = {"image": image} if image is not None else None
        with patch(
            "app.api.routes.posts.upload_object",
            new=AsyncMock(return_value=IMAGE_URL),
        ):
            return self.client.post(
                f"{API}/posts",
                data={"title": title, "content": content, "published": published},
                files=files,
                headers=self.auth(token),
            )
