"""Authorization request received by the OAuth authorize endpoint."""

from __future__ import annotations

from enum import StrEnum

from serde_msgspec import StructBaseStrict

OIDC_SCOPE = "openid"


class ResponseType(StrEnum):
    """Requested ``response_type`` of an authorization request."""

    CODE = "code"
    CODE_ID_TOKEN = "code id_token"


class ClientId(StructBaseStrict):
    """Registered OAuth client identifier."""

    value: str


class RequestJwtContainer(StructBaseStrict):
    """Signed request object passed with the ``request`` parameter."""

    value: str


class AuthRequest(StructBaseStrict, rename="camel"):
    """Immutable authorization request.

    Wire names are camelCase (``redirectUri``, ``responseType``).
    """

    client: ClientId
    scopes: tuple[str, ...]
    redirect_uri: str
    state: str | None
    response_type: ResponseType = ResponseType.CODE
    nonce: str | None = None
    request: RequestJwtContainer | None = None

    def is_oidc(self) -> bool:
        """Return True when the ``openid`` scope was requested."""
        return any(scope.lower() == OIDC_SCOPE for scope in self.scopes)
