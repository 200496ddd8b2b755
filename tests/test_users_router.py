from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from blog_auth.api import deps
from blog_auth.api.deps import (
    get_current_user,
    get_delete_user_use_case,
    get_get_me_use_case,
    get_get_nickname_by_email_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_register_user_use_case,
    get_update_password_use_case,
    get_update_role_use_case,
    get_update_user_use_case,
)
from blog_auth.application.dto.users import UserOutput
from blog_auth.application.use_cases.get_me import GetMeUseCase
from blog_auth.domain.entities.user import Role, User
from blog_auth.domain.exceptions import (
    EmailAlreadyExistsError,
    InvalidPasswordError,
    NicknameAlreadyExistsError,
    UserNotFoundError,
)
from blog_auth.main import app


NOW = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
API_KEY = "internal-secret"


class FakeRegisterUseCase:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.commands = []

    def execute(self, command):
        self.commands.append(command)
        if self.error is not None:
            raise self.error
        return UserOutput(
            id="u1",
            name=command.name,
            email=command.email,
            nickname=command.nickname,
            role="ROLE_USER",
            created_at=NOW,
        )


def _payload() -> dict:
    return {"name": "Alice", "email": "alice@example.com", "nickname": "alice", "password": "Pw1!aaaa"}


@pytest.fixture
def client(monkeypatch):
    settings = replace(deps.get_settings(), internal_api_key=API_KEY)
    monkeypatch.setattr(deps, "get_settings", lambda: settings)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_create_user_with_api_key(client):
    use_case = FakeRegisterUseCase()
    app.dependency_overrides[get_register_user_use_case] = lambda: use_case

    response = client.post("/api/v1/users", json=_payload(), headers={"X-API-KEY": API_KEY})

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["email"] == "alice@example.com"
    assert data["role"] == "ROLE_USER"
    assert "createdAt" in data
    assert "password" not in data
    assert use_case.commands[0].nickname == "alice"


@pytest.mark.parametrize("headers", [{}, {"X-API-KEY": "wrong"}])
def test_create_user_requires_valid_api_key(client, headers):
    use_case = FakeRegisterUseCase()
    app.dependency_overrides[get_register_user_use_case] = lambda: use_case

    response = client.post("/api/v1/users", json=_payload(), headers=headers)

    assert response.status_code == 401
    assert use_case.commands == []


@pytest.mark.parametrize(
    "error,status",
    [
        (EmailAlreadyExistsError("Email already in use."), 409),
        (NicknameAlreadyExistsError("Nickname already in use."), 409),
        (InvalidPasswordError("password must have at least 8 characters."), 400),
        (ValueError("email must be a valid email address."), 400),
    ],
)
def test_create_user_errors(client, error, status):
    app.dependency_overrides[get_register_user_use_case] = lambda: FakeRegisterUseCase(error=error)

    response = client.post("/api/v1/users", json=_payload(), headers={"X-API-KEY": API_KEY})

    assert response.status_code == status
    assert response.json()["message"] == str(error)


def test_get_me_returns_current_user(client):
    user = User(
        id="u1",
        name="Alice",
        email="alice@example.com",
        nickname="alice",
        password_hash="secret-hash",
        role=Role.ADMIN,
        created_at=NOW,
        updated_at=NOW,
    )
    app.dependency_overrides[get_current_user] = lambda: user
    app.dependency_overrides[get_get_me_use_case] = lambda: GetMeUseCase()

    response = client.get("/api/v1/users/me")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["id"] == "u1"
    assert data["role"] == "ROLE_ADMIN"
    assert "passwordHash" not in data


def _user(user_id: str = "u1", role: Role = Role.USER) -> User:
    return User(
        id=user_id,
        name="Alice",
        email=f"{user_id}@example.com",
        nickname=user_id,
        password_hash="secret-hash",
        role=role,
        created_at=NOW,
        updated_at=NOW,
    )


def _output(user_id: str = "u1", role: str = "ROLE_USER") -> UserOutput:
    return UserOutput(
        id=user_id,
        name="Alice",
        email=f"{user_id}@example.com",
        nickname=user_id,
        role=role,
        created_at=NOW,
    )


class RecordingUseCase:
    def __init__(self, result=None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls = []

    def execute(self, *args, **kwargs):
        self.calls.append(args[0] if args else kwargs)
        if self.error is not None:
            raise self.error
        return self.result


def _act_as(user: User) -> None:
    app.dependency_overrides[get_current_user] = lambda: user


def test_list_users_requires_admin(client):
    use_case = RecordingUseCase(result=[_output("u1"), _output("u2")])
    app.dependency_overrides[get_list_users_use_case] = lambda: use_case

    _act_as(_user("u1"))
    assert client.get("/api/v1/users").status_code == 403
    assert use_case.calls == []

    _act_as(_user("admin", Role.ADMIN))
    response = client.get("/api/v1/users")
    assert response.status_code == 200
    assert [item["id"] for item in response.json()["data"]] == ["u1", "u2"]


def test_get_nickname_by_email_is_public(client):
    use_case = RecordingUseCase(result="alice")
    app.dependency_overrides[get_get_nickname_by_email_use_case] = lambda: use_case

    response = client.get("/api/v1/users/email/alice@example.com")

    assert response.status_code == 200
    assert response.json()["data"] == {"nickname": "alice"}
    assert use_case.calls == [{"email": "alice@example.com"}]


def test_get_nickname_by_unknown_email_is_404(client):
    error = UserNotFoundError("No user is registered with this email.")
    app.dependency_overrides[get_get_nickname_by_email_use_case] = lambda: RecordingUseCase(error=error)

    response = client.get("/api/v1/users/email/nobody@example.com")

    assert response.status_code == 404
    assert response.json()["message"] == str(error)


@pytest.mark.parametrize(
    "actor,status",
    [
        (_user("u1"), 200),
        (_user("u2"), 403),
        (_user("admin", Role.ADMIN), 200),
    ],
)
def test_get_user_allows_self_or_admin(client, actor, status):
    app.dependency_overrides[get_get_user_use_case] = lambda: RecordingUseCase(result=_output("u1"))
    _act_as(actor)

    response = client.get("/api/v1/users/u1")

    assert response.status_code == status


def test_get_missing_user_is_404(client):
    app.dependency_overrides[get_get_user_use_case] = lambda: RecordingUseCase(
        error=UserNotFoundError("User u9 not found.")
    )
    _act_as(_user("admin", Role.ADMIN))

    assert client.get("/api/v1/users/u9").status_code == 404


def test_me_route_is_not_shadowed_by_user_id_route(client):
    app.dependency_overrides[get_get_me_use_case] = lambda: GetMeUseCase()
    app.dependency_overrides[get_get_user_use_case] = lambda: RecordingUseCase(error=AssertionError("wrong route"))
    _act_as(_user("u1"))

    response = client.get("/api/v1/users/me")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == "u1"


def test_update_user_passes_partial_fields(client):
    use_case = RecordingUseCase(result=_output("u1"))
    app.dependency_overrides[get_update_user_use_case] = lambda: use_case
    _act_as(_user("u1"))

    response = client.put("/api/v1/users/u1", json={"nickname": "alice2"})

    assert response.status_code == 200
    command = use_case.calls[0]
    assert command.user_id == "u1"
    assert command.nickname == "alice2"
    assert command.name is None
    assert command.email is None


@pytest.mark.parametrize(
    "error,status",
    [
        (EmailAlreadyExistsError("Email already in use."), 409),
        (NicknameAlreadyExistsError("Nickname already in use."), 409),
        (UserNotFoundError("User u1 not found."), 404),
        (ValueError("email must be a valid email address."), 400),
    ],
)
def test_update_user_errors(client, error, status):
    app.dependency_overrides[get_update_user_use_case] = lambda: RecordingUseCase(error=error)
    _act_as(_user("u1"))

    response = client.put("/api/v1/users/u1", json={"email": "bob@example.com"})

    assert response.status_code == status
    assert response.json()["message"] == str(error)


def test_update_user_rejects_short_name(client):
    use_case = RecordingUseCase(result=_output("u1"))
    app.dependency_overrides[get_update_user_use_case] = lambda: use_case
    _act_as(_user("u1"))

    response = client.put("/api/v1/users/u1", json={"name": "A"})

    assert response.status_code == 400
    assert use_case.calls == []


def test_other_user_cannot_update_or_delete(client):
    update = RecordingUseCase(result=_output("u1"))
    delete = RecordingUseCase()
    password = RecordingUseCase()
    app.dependency_overrides[get_update_user_use_case] = lambda: update
    app.dependency_overrides[get_delete_user_use_case] = lambda: delete
    app.dependency_overrides[get_update_password_use_case] = lambda: password
    _act_as(_user("u2"))

    assert client.put("/api/v1/users/u1", json={"name": "Mallory"}).status_code == 403
    assert client.delete("/api/v1/users/u1").status_code == 403
    assert client.put("/api/v1/users/u1/password", json={"newPassword": "N3w!pass"}).status_code == 403
    assert update.calls == [] and delete.calls == [] and password.calls == []


def test_update_password_for_self(client):
    use_case = RecordingUseCase()
    app.dependency_overrides[get_update_password_use_case] = lambda: use_case
    _act_as(_user("u1"))

    response = client.put("/api/v1/users/u1/password", json={"newPassword": "N3w!pass"})

    assert response.status_code == 200
    assert response.json() == {"success": True, "data": None, "message": None}
    assert use_case.calls[0].new_password == "N3w!pass"


def test_update_password_policy_violation_is_400(client):
    error = InvalidPasswordError("password must have at least 8 characters.")
    app.dependency_overrides[get_update_password_use_case] = lambda: RecordingUseCase(error=error)
    _act_as(_user("u1"))

    response = client.put("/api/v1/users/u1/password", json={"newPassword": "longbutweak"})

    assert response.status_code == 400


def test_update_role_is_admin_only(client):
    use_case = RecordingUseCase(result=_output("u1", "ROLE_ADMIN"))
    app.dependency_overrides[get_update_role_use_case] = lambda: use_case

    _act_as(_user("u1"))
    assert client.put("/api/v1/users/u1/role", json={"role": "ROLE_ADMIN"}).status_code == 403
    assert use_case.calls == []

    _act_as(_user("admin", Role.ADMIN))
    response = client.put("/api/v1/users/u1/role", json={"role": "ROLE_ADMIN"})
    assert response.status_code == 200
    assert response.json()["data"]["role"] == "ROLE_ADMIN"
    assert use_case.calls[0].role == "ROLE_ADMIN"


def test_update_role_unknown_role_is_400(client):
    error = ValueError("role must be one of ROLE_USER, ROLE_ADMIN.")
    app.dependency_overrides[get_update_role_use_case] = lambda: RecordingUseCase(error=error)
    _act_as(_user("admin", Role.ADMIN))

    assert client.put("/api/v1/users/u1/role", json={"role": "ROLE_ROOT"}).status_code == 400


def test_admin_deletes_user(client):
    use_case = RecordingUseCase()
    app.dependency_overrides[get_delete_user_use_case] = lambda: use_case
    _act_as(_user("admin", Role.ADMIN))

    response = client.delete("/api/v1/users/u1")

    assert response.status_code == 200
    assert use_case.calls == [{"user_id": "u1"}]


def test_delete_missing_user_is_404(client):
    app.dependency_overrides[get_delete_user_use_case] = lambda: RecordingUseCase(
        error=UserNotFoundError("User u1 not found.")
    )
    _act_as(_user("u1"))

    assert client.delete("/api/v1/users/u1").status_code == 404
