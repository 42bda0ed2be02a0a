from __future__ import annotations

from typing import Annotated, Callable

from fastapi import Depends, Request

from eventhub.auth.policy import Capability, has_capability
from eventhub.auth.tokens import Principal, TokenExpired, TokenInvalid, verify_access_token
from eventhub.services.error_codes import ErrorCode
from eventhub.services.exceptions import AuthenticationError, PermissionDeniedError


def get_current_principal(request: Request) -> Principal:
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        raise AuthenticationError(ErrorCode.TOKEN_MISSING.value, "Access token required")

    token = auth.removeprefix("Bearer ").strip()
    try:
        return verify_access_token(token)
    except TokenExpired:
        raise AuthenticationError(ErrorCode.TOKEN_EXPIRED.value, "Token expired") from None
    except TokenInvalid:
        raise AuthenticationError(ErrorCode.TOKEN_INVALID.value, "Invalid token") from None


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]


def require_capability(capability: Capability) -> Callable[[Principal], Principal]:
    def _dependency(principal: CurrentPrincipal) -> Principal:
        if not has_capability(principal.role, capability):
            raise PermissionDeniedError(ErrorCode.FORBIDDEN.value, "Insufficient permissions")
        return principal

    return _dependency
