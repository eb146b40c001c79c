"""OAuth/OIDC authorization server value types."""

from oauth_server.auth_request import (
    OIDC_SCOPE,
    AuthRequest,
    ClientId,
    RequestJwtContainer,
    ResponseType,
)

__all__ = ["OIDC_SCOPE", "AuthRequest", "ClientId", "RequestJwtContainer", "ResponseType"]
