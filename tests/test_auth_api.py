from datetime import timedelta

from alertmap_testcase import AlertMapTestCase


def session_cookie_headers(response):
    return [h for h in response.headers.getlist("Set-Cookie") if h.startswith("access_token_cookie=")]


class TestSignup(AlertMapTestCase):
    def test_register_returns_summary_and_logs_in(self):
        resp = self.register()
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["user"]["username"], "alice")
        self.assertEqual(set(body["user"]), {"id", "username"})

        me = self.client.get("/api/user")
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.get_json(), body["user"])

    def test_session_cookie_flags(self):
        resp = self.register()
        cookie = session_cookie_headers(resp)[0]
        self.assertIn("HttpOnly", cookie)
        self.assertIn("SameSite=Lax", cookie)
        self.assertIn("Max-Age=604800", cookie)

    def test_duplicate_username_is_a_conflict(self):
        self.register()
        resp = self.register(client=self.app.test_client())
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "conflict")

    def test_register_validation(self):
        resp = self.client.post("/api/register", json={"username": "al", "password": "123"})
        self.assertEqual(resp.status_code, 400)
        errors = resp.get_json()["errors"]
        self.assertIn("username", errors)
        self.assertIn("password", errors)

    def test_password_kept_exactly_as_typed(self):
        resp = self.register(password="  secret123  ")
        self.assertEqual(resp.status_code, 200)

        other = self.app.test_client()
        self.assertEqual(self.login(password="secret123", client=other).status_code, 400)
        self.assertEqual(self.login(password="  secret123  ", client=other).status_code, 200)

    def test_surrounding_spaces_count_towards_password_length(self):
        resp = self.register(password="  abc   ")
        self.assertEqual(resp.status_code, 200, resp.get_json())

    def test_username_is_trimmed(self):
        self.register(username="  alice  ")
        self.assertEqual(self.login(username="alice", client=self.app.test_client()).status_code, 200)

    def test_register_requires_json_object(self):
        resp = self.client.post("/api/register", data="username=alice", content_type="text/plain")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["error"], "validation")


class TestLogin(AlertMapTestCase):
    def setUp(self):
        super().setUp()
        self.register(client=self.app.test_client())

    def test_login(self):
        resp = self.login()
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["user"]["username"], "alice")
        self.assertTrue(session_cookie_headers(resp))
        self.assertEqual(self.client.get("/api/user").status_code, 200)

    def test_failures_do_not_reveal_which_field_was_wrong(self):
        wrong_password = self.login(password="wrong-password")
        unknown_user = self.login(username="mallory")

        self.assertEqual(wrong_password.status_code, 400)
        self.assertEqual(unknown_user.status_code, 400)
        self.assertEqual(wrong_password.get_json(), unknown_user.get_json())
        self.assertEqual(wrong_password.get_json()["message"], "Invalid username or password")
        self.assertEqual(self.client.get("/api/user").status_code, 401)

    def test_password_never_serialised(self):
        self.login()
        body = self.client.get("/api/user").get_data(as_text=True)
        self.assertNotIn("password", body)
        self.assertNotIn("scrypt", body)

    def test_logout(self):
        self.login()
        resp = self.client.post("/api/logout")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/api/user").status_code, 401)

    def test_logout_when_anonymous(self):
        self.assertEqual(self.client.post("/api/logout").status_code, 200)


class TestAnonymous(AlertMapTestCase):
    def test_current_user_requires_session(self):
        resp = self.client.get("/api/user")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.get_json()["error"], "authentication")

    def test_garbage_cookie_is_rejected(self):
        self.client.set_cookie("access_token_cookie", "not-a-jwt")
        resp = self.client.get("/api/admin/alerts")
        self.assertEqual(resp.status_code, 401)


class TestRollingSession(AlertMapTestCase):
    # Tokens live one hour but anything under a day is refreshed
    config_overrides = {
        "JWT_ACCESS_TOKEN_EXPIRES": timedelta(hours=1),
        "JWT_REFRESH_WINDOW": timedelta(days=1),
    }

    def test_authenticated_request_reissues_cookie(self):
        self.register()
        resp = self.client.get("/api/admin/alerts")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(session_cookie_headers(resp))

    def test_anonymous_request_does_not_set_cookie(self):
        resp = self.client.get("/api/alerts")
        self.assertEqual(session_cookie_headers(resp), [])


class TestFreshSessionNotRefreshed(AlertMapTestCase):
    def test_token_far_from_expiry_is_left_alone(self):
        self.register()
        resp = self.client.get("/api/admin/alerts")
        self.assertEqual(session_cookie_headers(resp), [])
