TEST_PASSWORD = "s3cret-pass"


def register(client, username="alice", password=TEST_PASSWORD):
    return client.post(
        "/register", data={"username": username, "password": password}, follow_redirects=False
    )


def login(client, username="alice", password=TEST_PASSWORD):
    return client.post("/login", data={"username": username, "password": password}, follow_redirects=False)


def token_cookie_cleared(res) -> bool:
    return any(
        h.startswith("token=") and "Max-Age=0" in h for h in res.headers.get_list("set-cookie")
    )


class TestPages:
    def test_anonymous_index_redirects_to_login(self, client):
        res = client.get("/", follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "/login"

    def test_register_login_and_index(self, client):
        res = register(client)
        assert res.status_code == 303
        assert res.headers["location"] == "/login"

        page = client.get("/login")
        assert "Registration successful! Please log in." in page.text

        res = login(client)
        assert res.status_code == 303
        assert res.headers["location"] == "/"
        cookie = next(h for h in res.headers.get_list("set-cookie") if h.startswith("token="))
        assert "HttpOnly" in cookie
        assert "Max-Age=86400" in cookie

        page = client.get("/")
        assert page.status_code == 200
        assert "Logged in successfully" in page.text
        assert "alice" in page.text

    def test_logged_in_user_skips_login_page(self, client):
        register(client)
        login(client)
        res = client.get("/login", follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "/"

    def test_bad_login_flashes_error(self, client):
        register(client)
        res = login(client, password="wrong")
        assert res.status_code == 303
        assert res.headers["location"] == "/login"
        assert "token" not in client.cookies
        assert "Invalid credentials" in client.get("/login").text

    def test_duplicate_registration_flashes_error(self, client):
        register(client)
        res = register(client)
        assert res.headers["location"] == "/register"
        assert "Username already exists" in client.get("/register").text

    def test_logout_clears_cookie(self, client):
        register(client)
        login(client)
        res = client.get("/logout", follow_redirects=False)
        assert res.status_code == 303
        assert token_cookie_cleared(res)
        assert client.get("/", follow_redirects=False).headers["location"] == "/login"

    def test_garbage_cookie_fails_open_and_is_cleared(self, client):
        client.cookies.set("token", "garbage")
        res = client.get("/login")
        assert res.status_code == 200
        assert token_cookie_cleared(res)

    def test_index_lists_own_todos(self, client):
        register(client)
        login(client)
        client.post("/todos", json={"title": "Water plants"})
        page = client.get("/")
        assert "Water plants" in page.text


class TestTodoEndpoints:
    def test_mutations_return_full_records(self, client):
        register(client)
        login(client)

        res = client.post("/todos", json={"title": "Buy milk"})
        assert res.status_code == 201
        todo = res.json()
        assert todo["title"] == "Buy milk"
        assert todo["read"] is False

        res = client.put(f"/todos/{todo['id']}", json={"completed": True})
        assert res.status_code == 200
        assert res.json()["completed"] is True
        assert res.json()["title"] == "Buy milk"

        res = client.patch(f"/todos/{todo['id']}/read")
        assert res.status_code == 200
        assert res.json()["read"] is True

        res = client.delete(f"/todos/{todo['id']}")
        assert res.status_code == 200
        assert res.json() == {"message": "Todo deleted successfully"}

        assert client.delete(f"/todos/{todo['id']}").status_code == 404

    def test_anonymous_mutation_is_unauthorized(self, client):
        res = client.post("/todos", json={"title": "x"})
        assert res.status_code == 401
        assert res.json() == {"error": "Unauthorized"}

    def test_stale_cookie_on_mutation_is_cleared(self, client):
        client.cookies.set("token", "garbage")
        res = client.post("/todos", json={"title": "x"})
        assert res.status_code == 401
        assert token_cookie_cleared(res)

    def test_update_without_body_changes_nothing(self, client):
        register(client)
        login(client)
        todo = client.post("/todos", json={"title": "Keep", "description": "As is"}).json()

        res = client.put(f"/todos/{todo['id']}")
        assert res.status_code == 200
        assert res.json()["title"] == "Keep"
        assert res.json()["description"] == "As is"
        assert res.json()["completed"] is False

    def test_anonymous_malformed_body_is_unauthorized(self, client):
        res = client.post("/todos", content="not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 401
        assert res.json() == {"error": "Unauthorized"}

        client.cookies.set("token", "garbage")
        res = client.put(f"/todos/{'a' * 24}", json={"completed": "definitely"})
        assert res.status_code == 401
        assert token_cookie_cleared(res)

    def test_malformed_body_when_logged_in(self, client):
        register(client)
        login(client)
        res = client.post("/todos", content="not json", headers={"Content-Type": "application/json"})
        assert res.status_code == 400
        assert res.json()["error"] == "Request validation failed"

    def test_malformed_id(self, client):
        register(client)
        login(client)
        res = client.patch("/todos/123/read")
        assert res.status_code == 400
        assert res.json() == {"error": "Invalid todo ID"}

    def test_unknown_route_is_json_404(self, client):
        res = client.get("/no/such/page")
        assert res.status_code == 404
        assert res.json() == {"error": "Not found"}
