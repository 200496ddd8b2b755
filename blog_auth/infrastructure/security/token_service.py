from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import math
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable

import jwt

from blog_auth.application.dto.auth import IssuedToken
from blog_auth.application.ports.token_port import TokenPort
from blog_auth.domain.entities.user import Principal
from blog_auth.shared.logging_config import mask_secret


logger = logging.getLogger(__name__)

ROLES_CLAIM = "auth"
TYPE_CLAIM = "typ"

# RFC 7518 3.2: the key must be at least as long as the hash output.
MIN_KEY_BYTES = {
    "HS256": 32,
    "HS384": 48,
    "HS512": 64,
}


class InvalidSigningKeyError(ValueError):
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def decode_signing_key(secret_b64: str, *, algorithm: str) -> bytes:
    """Decode the configured base64 key and check it is usable for algorithm."""
    if algorithm not in MIN_KEY_BYTES:
        raise InvalidSigningKeyError(f"Unsupported JWT algorithm: {algorithm}.")
    if not secret_b64:
        raise InvalidSigningKeyError("JWT secret key is empty.")
    try:
        key = base64.b64decode(secret_b64.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidSigningKeyError("JWT secret key is not valid base64.") from exc
    if len(key) < MIN_KEY_BYTES[algorithm]:
        raise InvalidSigningKeyError(
            f"JWT secret key must decode to at least {MIN_KEY_BYTES[algorithm]} bytes for {algorithm}."
        )
    return key


class JwtTokenService(TokenPort):
    def __init__(
        self,
        *,
        signing_key: bytes,
        algorithm: str = "HS512",
        clock: Callable[[], datetime] = utcnow,
    ):
        self._signing_key = signing_key
        self._algorithm = algorithm
        self._clock = clock

    @classmethod
    def from_base64_secret(
        cls,
        secret_b64: str,
        *,
        algorithm: str = "HS512",
        clock: Callable[[], datetime] = utcnow,
    ) -> JwtTokenService:
        key = decode_signing_key(secret_b64, algorithm=algorithm)
        return cls(signing_key=key, algorithm=algorithm, clock=clock)

    def issue(
        self,
        *,
        principal: Principal,
        ttl: timedelta,
        token_type: str,
        now: datetime,
    ) -> IssuedToken:
        # exp is whole seconds; round up so the token never expires before now + ttl.
        exp_ts = math.ceil((now + ttl).timestamp())
        exp = datetime.fromtimestamp(exp_ts, tz=timezone.utc)
        payload = {
            "sub": principal.subject,
            ROLES_CLAIM: ",".join(principal.roles),
            TYPE_CLAIM: token_type,
            "jti": secrets.token_hex(16),
            "iat": int(now.timestamp()),
            "exp": exp_ts,
        }
        token = jwt.encode(payload, self._signing_key, algorithm=self._algorithm)
        return IssuedToken(token=token, expires_at=exp)

    def validate(self, *, token: str, expected_type: str | None = None) -> bool:
        try:
            payload = self._decode(token)
        except jwt.InvalidSignatureError:
            logger.info("token_codec: rejected reason=bad_signature token=%s", mask_secret(token))
            return False
        except jwt.InvalidAlgorithmError:
            logger.info("token_codec: rejected reason=unsupported token=%s", mask_secret(token))
            return False
        except jwt.PyJWTError:
            logger.info("token_codec: rejected reason=malformed token=%s", mask_secret(token))
            return False

        if self._clock().timestamp() > payload["exp"]:
            logger.info(
                "token_codec: rejected reason=expired sub=%s token=%s",
                payload.get("sub"),
                mask_secret(token),
            )
            return False

        if expected_type is not None and payload.get(TYPE_CLAIM) != expected_type:
            logger.info(
                "token_codec: rejected reason=wrong_type expected=%s got=%s sub=%s",
                expected_type,
                payload.get(TYPE_CLAIM),
                payload.get("sub"),
            )
            return False
        return True

    def parse(self, *, token: str) -> Principal:
        payload = self._decode(token)
        raw_roles = payload.get(ROLES_CLAIM) or ""
        roles = tuple(role for role in str(raw_roles).split(",") if role)
        return Principal(subject=str(payload["sub"]), roles=roles)

    def hash_token(self, *, token: str) -> str:
        return hashlib.sha256(token.encode("utf-8")).hexdigest()

    def _decode(self, token: str) -> dict:
        # Expiry is checked against the injected clock, not inside PyJWT.
        return jwt.decode(
            token,
            self._signing_key,
            algorithms=[self._algorithm],
            options={
                "require": ["sub", "exp"],
                "verify_exp": False,
                "verify_iat": False,
                "verify_nbf": False,
            },
        )
