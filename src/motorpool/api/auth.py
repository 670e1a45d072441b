"""Auth API — registration and authentication.

Learn: Routes for username/password authentication:
- POST /register     → create a user, return a signed token
- POST /authenticate → username/password → signed token

Both return the token under data.jwt. A failed authentication returns the
same message whether the username is unknown or the password is wrong,
and costs the same bcrypt check in both cases, so responses do not reveal
which usernames exist.
"""

from functools import lru_cache

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from motorpool.auth.dependencies import get_token_service
from motorpool.auth.jwt import TokenService
from motorpool.auth.password import hash_password, verify_password
from motorpool.db.engine import get_db
from motorpool.errors import AuthFailure
from motorpool.schemas.auth import Credentials, TokenData
from motorpool.schemas.common import Envelope
from motorpool.services.credential_store import CredentialStore

router = APIRouter()


@lru_cache(maxsize=None)
def _decoy_hash(rounds: int) -> str:
    """Hash checked when the username is unknown, to keep timing uniform.

    Built at the same cost as real user hashes, one per configured cost.
    """
    return hash_password("motorpool-decoy-password", rounds)


@router.post("/register", response_model=Envelope[TokenData], status_code=201)
async def register(
    body: Credentials,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Create a user account and sign them in."""
    rounds = request.app.state.settings.bcrypt_rounds
    store = CredentialStore(db)
    user_id = await store.register(body.username, hash_password(body.password, rounds))
    await db.commit()

    token = tokens.issue(user_id, username=body.username)
    return Envelope(message="Registered", data=TokenData(jwt=token))


@router.post("/authenticate", response_model=Envelope[TokenData])
async def authenticate(
    body: Credentials,
    request: Request,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    """Login with username and password → signed token."""
    user = await CredentialStore(db).find_by_username(body.username)

    if user is None:
        verify_password(
            body.password, _decoy_hash(request.app.state.settings.bcrypt_rounds)
        )
        raise AuthFailure()
    if not verify_password(body.password, user.password_hash):
        raise AuthFailure()

    token = tokens.issue(user.id, username=user.username)
    return Envelope(message="Authenticated", data=TokenData(jwt=token))
