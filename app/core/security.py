from datetime import datetime, timedelta, timezone
from jose import jwt
from passlib.context import CryptContext
from app.core.config import settings

# ── Passwords ─────────────────────────────────────────────────────────
# deprecated="auto": hashes made with weaker settings report needs_update,
# and login swaps them for a fresh hash (see verify_and_update_password).
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Verified against when the account does not exist, so an unknown email
# costs the same bcrypt round as a wrong password.
_DUMMY_HASH = "$2b$12$KIXa8pRj6u8OjKvI7bQsqOEkBqYHqFbY3Ku.Fsp7p/e8XGJ0XOGK6"

# bcrypt hashes are always 60 chars; anything shorter was truncated
_BCRYPT_HASH_LEN = 60

TOKEN_TYPE = "access"


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_and_update_password(plain: str, hashed: str | None) -> tuple[bool, str | None]:
    """
    Returns (ok, new_hash). new_hash is set only when the password matched
    and the stored hash should be replaced.

    A missing, truncated or malformed stored hash is a failed login, never
    an error; a dummy verify still runs so timing stays uniform.
    """
    if not hashed or len(hashed) < _BCRYPT_HASH_LEN:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False, None
    try:
        return pwd_context.verify_and_update(plain, hashed)
    except ValueError:
        pwd_context.verify(plain, _DUMMY_HASH)
        return False, None


# ── Access tokens ─────────────────────────────────────────────────────
def create_access_token(user_id: int, email: str, role: str) -> str:
    """
    Signed JWT for a staff user. Rotating SECRET_KEY invalidates every
    token already issued.

    Claims: sub (user id), email, role (COORDINATOR / MONITOR),
    type, iat, exp.
    """
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "type": TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verifies signature and expiry; raises jose.JWTError otherwise."""
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
