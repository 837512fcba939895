"""
End-to-end tests for the /v1/users endpoints.
"""
from tests.fakes import make_user

STUDENT = {
    "id": "u-1",
    "email": "stud01@uniproject.jp",
    "custom_id": "stud01",
    "name": "Student One",
    "external_email": "real@example.com",
    "period": "0",
    "is_enable": True,
}


def _student(**overrides):
    body = dict(STUDENT)
    body.update(overrides)
    return body


# ============================================
# Create / read
# ============================================

class TestCreateUser:

    def test_create_user(self, client):
        response = client.post("/v1/users", json=STUDENT)
        assert response.status_code == 200
        assert response.json() == {"status": "success"}

        response = client.get("/v1/users/u-1")
        assert response.status_code == 200
        body = response.json()
        assert body["custom_id"] == "stud01"
        assert body["email"] == "stud01@uniproject.jp"
        assert "password_hash" not in body

    def test_create_duplicate_user(self, client):
        assert client.post("/v1/users", json=STUDENT).status_code == 200

        response = client.post("/v1/users", json=STUDENT)
        assert response.status_code == 409
        assert response.json() == {"code": 3002, "message": "Resource already exists"}

    def test_create_with_bad_custom_id(self, client):
        response = client.post("/v1/users", json=_student(custom_id="a__b"))
        assert response.status_code == 400
        assert response.json() == {
            "code": 2007,
            "message": "CustomID does not match the required pattern",
        }

    def test_create_with_wrong_internal_email(self, client):
        response = client.post("/v1/users", json=_student(email="12.stud01@uniproject.jp"))
        assert response.status_code == 400
        assert response.json()["message"] == "Email does not match the required pattern"

    def test_create_with_bad_external_email(self, client):
        response = client.post("/v1/users", json=_student(external_email="nope"))
        assert response.status_code == 400
        assert response.json()["message"] == "ExternalEmail does not match the required pattern"

    def test_create_rejects_trailing_newline_in_custom_id(self, client):
        response = client.post("/v1/users", json=_student(
            custom_id="stud01\n",
            email="stud01\n@uniproject.jp",
        ))
        assert response.status_code == 400
        assert response.json()["message"] == "CustomID does not match the required pattern"
        assert client.get("/v1/users/u-1").status_code == 404

    def test_create_rejects_trailing_newline_in_external_email(self, client):
        response = client.post("/v1/users", json=_student(external_email="real@example.com\n"))
        assert response.status_code == 400
        assert response.json()["message"] == "ExternalEmail does not match the required pattern"

    def test_create_generates_id(self, client):
        body = _student()
        del body["id"]
        assert client.post("/v1/users", json=body).status_code == 200

        users = client.get("/v1/users").json()["users"]
        assert len(users) == 1
        assert users[0]["id"]

    def test_malformed_json(self, client):
        response = client.post(
            "/v1/users",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"status": "Bad Request"}

    def test_wrongly_typed_field(self, client):
        response = client.post("/v1/users", json=_student(is_enable="definitely"))
        assert response.status_code == 400
        assert response.json() == {"status": "Bad Request"}


class TestGetUser:

    def test_missing_user(self, client):
        response = client.get("/v1/users/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"status": "User Not Found"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/v1/users/does-not-exist", headers={"X-Request-ID": "req-42"})
        assert response.headers["X-Request-ID"] == "req-42"

    def test_request_id_is_generated(self, client):
        response = client.get("/v1/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
        assert response.headers["X-Request-ID"]


# ============================================
# List / search
# ============================================

def _seed(client, count):
    for i in range(count):
        user = make_user(id=f"u-{i}", custom_id=f"stud{i}")
        body = _student(id=user.id, custom_id=user.custom_id.value, email=user.email.value)
        assert client.post("/v1/users", json=body).status_code == 200


class TestListUsers:

    def test_pagination(self, client):
        _seed(client, 5)

        body = client.get("/v1/users", params={"limit": "2", "page": "3"}).json()
        assert body["total_count"] == 5
        assert body["pages"] == 3
        assert [u["id"] for u in body["users"]] == ["u-4"]

    def test_bad_pagination_falls_back(self, client):
        _seed(client, 3)

        body = client.get("/v1/users", params={"limit": "abc", "page": "-"}).json()
        assert body["total_count"] == 3
        assert body["pages"] == 1
        assert len(body["users"]) == 3

    def test_empty_list(self, client):
        body = client.get("/v1/users").json()
        assert body == {"total_count": 0, "pages": 0, "users": []}


class TestSearchUsers:

    def test_search_by_custom_id(self, client):
        _seed(client, 3)

        body = client.get("/v1/users/search", params={"custom_id": "stud1"}).json()
        assert body["total_count"] == 1
        assert body["users"][0]["id"] == "u-1"

    def test_search_without_filters_returns_all(self, client):
        _seed(client, 2)

        body = client.get("/v1/users/search").json()
        assert body["total_count"] == 2

    def test_search_with_bad_flag(self, client):
        response = client.get("/v1/users/search", params={"is_enable": "sometimes"})
        assert response.status_code == 400
        assert response.json()["code"] == 2008


# ============================================
# Update / delete
# ============================================

class TestUpdateUser:

    def test_patch_bad_custom_id(self, client):
        client.post("/v1/users", json=STUDENT)

        response = client.patch("/v1/users", json={"id": "u-1", "custom_id": "--bad"})
        assert response.status_code == 400
        assert response.json()["message"] == "CustomID does not match the required pattern"

    def test_patch_name(self, client):
        client.post("/v1/users", json=STUDENT)

        response = client.patch("/v1/users", json={"id": "u-1", "name": "Renamed"})
        assert response.status_code == 204

        body = client.get("/v1/users/u-1").json()
        assert body["name"] == "Renamed"
        assert body["external_email"] == "real@example.com"

    def test_patch_missing_user(self, client):
        response = client.patch("/v1/users", json={"id": "ghost", "name": "x"})
        assert response.status_code == 404
        assert response.json() == {"status": "User Not Found"}

    def test_patch_without_id(self, client):
        response = client.patch("/v1/users", json={"name": "x"})
        assert response.status_code == 400
        assert response.json()["code"] == 2008

    def test_put_replaces_user(self, client):
        client.post("/v1/users", json=STUDENT)

        replacement = _student(
            email="24.stud01@uniproject.jp",
            period="24",
            name="Replaced",
            is_enable=False,
        )
        assert client.put("/v1/users", json=replacement).status_code == 204

        body = client.get("/v1/users/u-1").json()
        assert body["period"] == "24"
        assert body["is_enable"] is False

    def test_put_missing_user(self, client):
        response = client.put("/v1/users", json=_student(id="ghost"))
        assert response.status_code == 404


class TestDeleteUser:

    def test_delete_user(self, client):
        client.post("/v1/users", json=STUDENT)

        assert client.delete("/v1/users/u-1").status_code == 204
        assert client.get("/v1/users/u-1").status_code == 404

    def test_delete_missing_user(self, client):
        response = client.delete("/v1/users/ghost")
        assert response.status_code == 404
