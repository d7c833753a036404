"""Password hashing and bearer tokens for notebook users."""
from datetime import timedelta
from jose import JWTError, jwt
import bcrypt
from app.core.config import settings
from app.core.time import utc_now


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def _registered_claims() -> dict:
    """Issuer/audience claims, only when configured."""
    claims = {}
    if settings.JWT_ISSUER:
        claims["iss"] = settings.JWT_ISSUER
    if settings.JWT_AUDIENCE:
        claims["aud"] = settings.JWT_AUDIENCE
    return claims


def create_user_token(
    user_id: str,
    email: str,
    is_admin: bool = False,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Issue a bearer token for a notebook user.

    `sub` is the user id. The email and admin flag ride along so a client
    can show who is signed in without another request.
    """
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": user_id,
        "email": email,
        "is_admin": bool(is_admin),
        "exp": utc_now() + lifetime,
        **_registered_claims(),
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_user_token(token: str) -> dict | None:
    """Claims of a valid token, or None if it is expired, forged or malformed."""
    expected = _registered_claims()
    try:
        return jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=expected.get("aud"),
            issuer=expected.get("iss"),
            options={"verify_aud": "aud" in expected, "verify_iss": "iss" in expected},
        )
    except JWTError:
        return None
