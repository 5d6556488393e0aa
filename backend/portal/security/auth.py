"""Bearer-token authentication.

Design:
- HS256 JWTs signed with `PORTAL_JWT_SECRET`; issuance happens elsewhere.
- Claims carry the account: `sub` (user id), `user_type`, optional `role`
  and `company_id`.
- The resulting `Principal` doubles as the user-role context consumed by
  `portal.security.permissions`.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException, Request, status

from portal.security.permissions import PermissionKind, evaluate_permission, is_company_user
from portal.security.roles import CompanyUserRole, UserType


JWT_SECRET_ENV = "PORTAL_JWT_SECRET"


class AuthError(HTTPException):
    def __init__(self, detail: str) -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated account extracted from token claims."""

    id: int
    user_type: UserType
    role: CompanyUserRole
    company_id: Optional[int]
    token_fingerprint: str  # stable, non-sensitive identifier for rate limiting/audit logs

    @property
    def scope_company_id(self) -> int:
        """Company whose data this principal works on (owner accounts use their own id)."""
        return self.company_id if self.company_id is not None else self.id


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _get_jwt_secret() -> bytes:
    secret = os.environ.get(JWT_SECRET_ENV)
    if not secret:
        raise RuntimeError(f"Missing required env var {JWT_SECRET_ENV}.")
    return secret.encode("utf-8")


def sign_jwt(payload: dict[str, Any], secret: str) -> str:
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    sig = hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()
    return f"{header_b64}.{payload_b64}.{_b64url_encode(sig)}"


def decode_and_verify_jwt(token: str) -> dict[str, Any]:
    """Verify the HS256 signature and the claims every portal token must carry."""
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise AuthError("Invalid token format.") from e

    try:
        signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
        expected = _b64url_encode(hmac.new(_get_jwt_secret(), signing_input, hashlib.sha256).digest())
        signature_ok = hmac.compare_digest(expected, sig_b64)
    except (UnicodeEncodeError, TypeError) as e:
        # compare_digest only accepts ASCII str
        raise AuthError("Invalid token format.") from e
    if not signature_ok:
        raise AuthError("Invalid token signature.")

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as e:
        raise AuthError("Invalid token encoding.") from e

    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise AuthError("Invalid token encoding.")
    if header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise AuthError("Unsupported token header.")

    exp = payload.get("exp")
    if exp is not None:
        try:
            exp_i = int(exp)
        except (TypeError, ValueError) as e:
            raise AuthError("Invalid exp claim.") from e
        if int(time.time()) >= exp_i:
            raise AuthError("Token expired.")

    if "sub" not in payload or "user_type" not in payload:
        raise AuthError("Missing required claims.")

    return payload


def token_fingerprint(token: str) -> str:
    raw = hashlib.sha256(token.encode("utf-8")).digest()
    return _b64url_encode(raw[:18])


def _int_claim(claims: dict[str, Any], name: str) -> Optional[int]:
    value = claims.get(name)
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise AuthError(f"Invalid {name} claim.") from e


def principal_from_token(token: str) -> Principal:
    claims = decode_and_verify_jwt(token)

    user_type = UserType.parse(claims["user_type"])
    if user_type is None:
        raise AuthError("Invalid user_type claim.")

    user_id = _int_claim(claims, "sub")
    if user_id is None:
        raise AuthError("Invalid sub claim.")

    return Principal(
        id=user_id,
        user_type=user_type,
        role=CompanyUserRole.parse(claims.get("role")),
        company_id=_int_claim(claims, "company_id"),
        token_fingerprint=token_fingerprint(token),
    )


def get_current_principal(request: Request) -> Principal:
    """Extract and validate the bearer token."""
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        raise AuthError("Missing bearer token.")
    token = auth.split(" ", 1)[1].strip()
    if not token:
        raise AuthError("Missing bearer token.")
    return principal_from_token(token)


def require_permission(kind: PermissionKind) -> Callable[[Principal], Principal]:
    """FastAPI dependency factory.

    Non-company accounts get 401 (nothing company-scoped exists for them);
    company users lacking the role get 403.
    """

    def _dep(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not is_company_user(principal):
            raise AuthError("Unauthorized")
        if not evaluate_permission(principal, kind):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return principal

    return _dep

