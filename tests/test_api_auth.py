"""Signup/login endpoints and the bearer-token dependencies."""

from datetime import UTC, datetime, timedelta

import jwt

from app.core.config import settings
from app.services.auth import verify_token

from tests.support import ADMIN_PASSWORD, API, USER_PASSWORD, ApiTestCase


def _messages(resp) -> list[str]:
    return [e["msg"] for e in resp.json()["errors"]]


class TestAdminSignup(ApiTestCase):
    def test_signup_then_login_returns_token_for_created_user(self) -> None:
        resp = self.signup()
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json(), {"message": "Admin created successfully"})

        resp = self.login("ab_1", ADMIN_PASSWORD)
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertTrue(data["token"])
        self.assertEqual(data["user"]["username"], "ab_1")
        self.assertEqual(data["user"]["role"], "ADMIN")
        self.assertNotIn("password_hash", data["user"])
        self.assertEqual(verify_token(data["token"]), data["user"]["id"])

    def test_fields_are_trimmed(self) -> None:
        resp = self.signup(username="  ab_1  ", firstname="  A ", lastname=" B ")
        self.assertEqual(resp.status_code, 201)
        user = self.login("ab_1", ADMIN_PASSWORD).json()["user"]
        self.assertEqual((user["firstname"], user["lastname"]), ("A", "B"))

    def test_duplicate_username(self) -> None:
        self.assertEqual(self.signup().status_code, 201)
        resp = self.signup()
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"][0]["msg"], "Username already exists")
        self.assertEqual(resp.json()["errors"][0]["path"], "username")

    def test_missing_fields_reported_per_field(self) -> None:
        resp = self.client.post(f"{API}/admin/signup", json={})
        self.assertEqual(resp.status_code, 400)
        errors = resp.json()["errors"]
        by_path = {e["path"]: e["msg"] for e in errors}
        self.assertEqual(by_path["firstname"], "First name is required")
        self.assertEqual(by_path["lastname"], "Last name is required")
        self.assertEqual(by_path["username"], "Username is required")
        self.assertEqual(by_path["password"], "Password is required")
        for error in errors:
            self.assertEqual(error["type"], "field")
            self.assertEqual(error["location"], "body")

    def test_username_rules(self) -> None:
        cases = {
            "ab": "Username must be between 3 and 20 characters long",
            "a" * 21: "Username must be between 3 and 20 characters long",
            "bad name!": "Username must contain only letters, numbers, underscores, or periods",
        }
        for username, message in cases.items():
            with self.subTest(username=username):
                resp = self.signup(username=username)
                self.assertEqual(resp.status_code, 400)
                self.assertIn(message, _messages(resp))

    def test_password_rules(self) -> None:
        cases = {
            "Ab1": "Password must be between 8 and 64 characters long",
            "abcdefg1": "Password must contain at least one uppercase letter",
            "ABCDEFG1": "Password must contain at least one lowercase letter",
            "Abcdefgh": "Password must contain at least one number",
        }
        for password, message in cases.items():
            with self.subTest(password=password):
                resp = self.signup(password=password)
                self.assertEqual(resp.status_code, 400)
                self.assertIn(message, _messages(resp))

    def test_passwords_must_match(self) -> None:
        resp = self.client.post(
            f"{API}/admin/signup",
            json={
                "firstname": "A",
                "lastname": "B",
                "username": "ab_1",
                "password": ADMIN_PASSWORD,
                "confirmpassword": "Different1",
            },
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["errors"][0]["msg"], "Passwords do not match")
        self.assertEqual(resp.json()["errors"][0]["path"], "confirmpassword")
        # Nothing was created.
        self.assertEqual(self.login("ab_1", ADMIN_PASSWORD).status_code, 401)

    def test_weak_password_with_matching_confirmation_reports_only_password_rule(self) -> None:
        resp = self.signup(password="weakpass")
        self.assertEqual(resp.status_code, 400)
        messages = _messages(resp)
        self.assertIn("Password must contain at least one uppercase letter", messages)
        self.assertNotIn("Passwords do not match", messages)
        self.assertEqual(
            [e["path"] for e in resp.json()["errors"]], ["password"]
        )


class TestLogin(ApiTestCase):
    def test_unknown_user_and_wrong_password_share_a_generic_message(self) -> None:
        self.signup()
        unknown = self.login("ghost", ADMIN_PASSWORD)
        wrong = self.login("ab_1", "Wrong1234")
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())

    def test_reader_cannot_use_admin_login(self) -> None:
        self.signup(username="reader", password=USER_PASSWORD, admin=False)
        resp = self.login("reader", USER_PASSWORD)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(
            _messages(resp), ["Your account does not meet the required permissions"]
        )

    def test_reader_login(self) -> None:
        self.signup(username="reader", password=USER_PASSWORD, admin=False)
        resp = self.login("reader", USER_PASSWORD, admin=False)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["user"]["role"], "USER")

    def test_admin_may_use_general_login(self) -> None:
        self.signup()
        self.assertEqual(self.login("ab_1", ADMIN_PASSWORD, admin=False).status_code, 200)

    def test_missing_credentials(self) -> None:
        resp = self.client.post(f"{API}/admin/login", json={"username": "  "})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(set(_messages(resp)), {"Username is required", "Password is required"})


class TestBearerToken(ApiTestCase):
    def test_missing_token(self) -> None:
        resp = self.client.get(f"{API}/users/me")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.headers["www-authenticate"], "Bearer")

    def test_invalid_token(self) -> None:
        resp = self.client.get(f"{API}/users/me", headers=self.auth("invalid.token.here"))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(_messages(resp), ["Invalid or expired token"])

    def test_expired_token(self) -> None:
        token = self.admin_token()
        user_id = verify_token(token)
        past = datetime.now(UTC) - timedelta(seconds=1)
        expired = jwt.encode(
            {"id": user_id, "exp": past},
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = self.client.get(f"{API}/users/me", headers=self.auth(expired))
        self.assertEqual(resp.status_code, 401)

    def test_token_for_deleted_account(self) -> None:
        admin = self.admin_token()
        reader = self.user_token()
        reader_id = verify_token(reader)
        self.client.delete(f"{API}/users/{reader_id}", headers=self.auth(admin))
        resp = self.client.get(f"{API}/users/me", headers=self.auth(reader))
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(_messages(resp), ["User not found"])
