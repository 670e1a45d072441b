"""FastAPI auth dependencies.

Learn: These are used as Depends() in route handlers (or on a whole router)
to extract and validate the caller's identity from the request.

The gate is a small state machine over the Authorization header:

    no header                        → MissingCredentials (401)
    header, scheme is not "Bearer"   → WrongScheme (401)
    Bearer, token fails verification → MalformedToken / InvalidSignature /
                                       ExpiredToken (401)
    Bearer, token verifies           → TokenClaims

Every rejection is raised, so FastAPI stops resolving the route and the
protected handler never runs.
"""

from typing import Optional

import structlog
from fastapi import Depends, Header, Request

from motorpool.auth.jwt import TokenClaims, TokenService
from motorpool.errors import MissingCredentials, TokenError, WrongScheme

logger = structlog.get_logger()

BEARER = "Bearer"


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def authenticate_header(
    authorization: Optional[str], tokens: TokenService
) -> TokenClaims:
    """Run the gate on a raw Authorization header value."""
    if not authorization:
        raise MissingCredentials()

    scheme, _, token = authorization.strip().partition(" ")
    if scheme != BEARER:
        raise WrongScheme()

    return tokens.verify(token.strip())


async def require_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(get_token_service),
) -> TokenClaims:
    """Authenticated identity (required — 401 otherwise).

    Learn: on success the claims are also attached to request.state so
    code that only has the Request (middleware, exception handlers) can
    see who the caller is.
    """
    try:
        identity = authenticate_header(authorization, tokens)
    except (MissingCredentials, WrongScheme, TokenError) as e:
        logger.info("auth.rejected", reason=e.code, path=request.url.path)
        raise

    request.state.identity = identity
    return identity
