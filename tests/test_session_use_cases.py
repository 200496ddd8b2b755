from __future__ import annotations

import base64
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from blog_auth.application.dto.auth import LoginLocalInput, RefreshSessionInput
from blog_auth.application.ports.token_port import ACCESS_TOKEN_TYPE, REFRESH_TOKEN_TYPE
from blog_auth.application.use_cases.auth_common import TokenLifetimes
from blog_auth.application.use_cases.login_local import LoginLocalUseCase
from blog_auth.application.use_cases.logout_session import LogoutSessionUseCase
from blog_auth.application.use_cases.refresh_session import RefreshSessionUseCase
from blog_auth.domain.entities.refresh_token import RefreshTokenRecord
from blog_auth.domain.entities.user import Role, User
from blog_auth.domain.exceptions import (
    AuthenticationFailedError,
    InvalidRefreshTokenError,
    StaleSessionError,
)
from blog_auth.infrastructure.security.credential_verifier import PasswordCredentialVerifier
from blog_auth.infrastructure.security.token_service import JwtTokenService


LIFETIMES = TokenLifetimes(access_ttl=timedelta(minutes=30), refresh_ttl=timedelta(days=7))


class FakeUsersPort:
    def __init__(self, users: list[User] | None = None):
        self.users = {user.id: user for user in users or []}

    def get_user_by_id(self, *, user_id: str) -> User | None:
        return self.users.get(user_id)

    def get_user_by_email(self, *, email: str) -> User | None:
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return user
        return None


class FakePasswordHasher:
    def hash(self, plain_password: str) -> str:
        return f"hashed::{plain_password}"

    def verify(self, plain_password: str, password_hash: str) -> bool:
        return password_hash == f"hashed::{plain_password}"


class FakeRefreshLedger:
    def __init__(self):
        self.records: dict[str, RefreshTokenRecord] = {}

    def get(self, *, subject: str) -> RefreshTokenRecord | None:
        return self.records.get(subject)

    def upsert(self, *, subject: str, token_hash: str, expires_at: datetime, now: datetime) -> None:
        self.records[subject] = RefreshTokenRecord(
            subject=subject,
            token_hash=token_hash,
            expires_at=expires_at,
            updated_at=now,
        )

    def replace_if_current(
        self,
        *,
        subject: str,
        current_hash: str,
        new_hash: str,
        expires_at: datetime,
        now: datetime,
    ) -> bool:
        record = self.records.get(subject)
        if record is None or record.token_hash != current_hash:
            return False
        self.upsert(subject=subject, token_hash=new_hash, expires_at=expires_at, now=now)
        return True


class SharedRefreshLedger(FakeRefreshLedger):
    """Lets every reader through the get() barrier before any swap happens."""

    def __init__(self, readers: int):
        super().__init__()
        self._lock = threading.Lock()
        self._barrier = threading.Barrier(readers, timeout=5)
        self.gate_open = False

    def get(self, *, subject: str) -> RefreshTokenRecord | None:
        with self._lock:
            record = self.records.get(subject)
        if self.gate_open:
            self._barrier.wait()
        return record

    def replace_if_current(self, **kwargs) -> bool:
        with self._lock:
            return super().replace_if_current(**kwargs)


class LosingRefreshLedger(FakeRefreshLedger):
    """Another request rotated the token between the check and the swap."""

    def replace_if_current(self, **_kwargs) -> bool:
        return False


def _user() -> User:
    now = datetime.now(timezone.utc)
    return User(
        id="3f1c0b1e-0000-4000-8000-000000000001",
        name="Alice",
        email="a@x.com",
        nickname="alice",
        password_hash="hashed::Pw1!aaaa",
        role=Role.USER,
        created_at=now,
        updated_at=now,
    )


def _token_service() -> JwtTokenService:
    return JwtTokenService.from_base64_secret(base64.b64encode(b"s" * 64).decode("ascii"))


def _login_use_case(token_service, ledger) -> LoginLocalUseCase:
    return LoginLocalUseCase(
        credential_verifier=PasswordCredentialVerifier(
            users_port=FakeUsersPort([_user()]),
            password_hasher=FakePasswordHasher(),
        ),
        token_port=token_service,
        refresh_ledger=ledger,
        lifetimes=LIFETIMES,
    )


def test_login_returns_two_distinct_tokens_and_records_refresh_hash():
    token_service = _token_service()
    ledger = FakeRefreshLedger()

    output = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))

    assert output.access_token
    assert output.refresh_token
    assert output.access_token != output.refresh_token
    assert output.subject == _user().id
    assert token_service.validate(token=output.access_token, expected_type=ACCESS_TOKEN_TYPE)
    assert token_service.validate(token=output.refresh_token, expected_type=REFRESH_TOKEN_TYPE)
    assert ledger.records[_user().id].token_hash == token_service.hash_token(token=output.refresh_token)
    assert output.refresh_expires_at > output.access_expires_at


def test_login_email_is_case_insensitive():
    output = _login_use_case(_token_service(), FakeRefreshLedger()).execute(
        LoginLocalInput(email="  A@X.com ", password="Pw1!aaaa")
    )

    assert output.subject == _user().id


@pytest.mark.parametrize(
    "email,password",
    [
        ("a@x.com", "wrong-password"),
        ("nobody@x.com", "Pw1!aaaa"),
    ],
)
def test_login_with_bad_credentials_fails(email, password):
    ledger = FakeRefreshLedger()

    with pytest.raises(AuthenticationFailedError):
        _login_use_case(_token_service(), ledger).execute(LoginLocalInput(email=email, password=password))
    assert ledger.records == {}


def test_refresh_rotates_both_tokens():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    output = use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    assert output.access_token not in (login.access_token, login.refresh_token)
    assert output.refresh_token not in (login.access_token, login.refresh_token)
    assert ledger.records[login.subject].token_hash == token_service.hash_token(token=output.refresh_token)


def test_superseded_refresh_token_is_stale():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)
    rotated = use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    with pytest.raises(StaleSessionError):
        use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))

    # The replay must not disturb the current session.
    assert use_case.execute(RefreshSessionInput(refresh_token=rotated.refresh_token)).refresh_token


def test_second_login_supersedes_first_refresh_token():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login_use_case = _login_use_case(token_service, ledger)
    first = login_use_case.execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    login_use_case.execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    with pytest.raises(StaleSessionError):
        use_case.execute(RefreshSessionInput(refresh_token=first.refresh_token))


@pytest.mark.parametrize("token", ["", "   ", "garbage"])
def test_refresh_with_invalid_token_fails(token):
    use_case = RefreshSessionUseCase(
        token_port=_token_service(),
        refresh_ledger=FakeRefreshLedger(),
        lifetimes=LIFETIMES,
    )

    with pytest.raises(InvalidRefreshTokenError):
        use_case.execute(RefreshSessionInput(refresh_token=token))


def test_refresh_rejects_access_token():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    with pytest.raises(InvalidRefreshTokenError):
        use_case.execute(RefreshSessionInput(refresh_token=login.access_token))


def test_refresh_without_ledger_entry_is_stale():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    ledger.records.clear()
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    with pytest.raises(StaleSessionError):
        use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))


def test_refresh_with_expired_ledger_entry_is_stale():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    record = ledger.records[login.subject]
    ledger.records[login.subject] = replace(record, expires_at=datetime.now(timezone.utc) - timedelta(seconds=1))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    with pytest.raises(StaleSessionError):
        use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))


def test_refresh_that_loses_rotation_race_is_stale():
    token_service = _token_service()
    ledger = LosingRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)

    with pytest.raises(StaleSessionError):
        use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))


def test_logout_leaves_ledger_untouched():
    token_service = _token_service()
    ledger = FakeRefreshLedger()
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    before = dict(ledger.records)
    use_case = LogoutSessionUseCase(token_port=token_service)

    use_case.execute(refresh_token=login.refresh_token)
    use_case.execute(refresh_token="garbage")
    use_case.execute(refresh_token=None)

    assert ledger.records == before


def test_concurrent_refresh_with_same_token_has_one_winner():
    token_service = _token_service()
    ledger = SharedRefreshLedger(readers=2)
    login = _login_use_case(token_service, ledger).execute(LoginLocalInput(email="a@x.com", password="Pw1!aaaa"))
    use_case = RefreshSessionUseCase(token_port=token_service, refresh_ledger=ledger, lifetimes=LIFETIMES)
    ledger.gate_open = True

    def rotate():
        try:
            return use_case.execute(RefreshSessionInput(refresh_token=login.refresh_token))
        except StaleSessionError as exc:
            return exc

    with ThreadPoolExecutor(max_workers=2) as pool:
        results = list(pool.map(lambda _: rotate(), range(2)))

    winners = [result for result in results if not isinstance(result, StaleSessionError)]
    assert len(winners) == 1
    assert sum(isinstance(result, StaleSessionError) for result in results) == 1
    assert ledger.records[login.subject].token_hash == token_service.hash_token(token=winners[0].refresh_token)
