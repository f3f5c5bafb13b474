import logging
from datetime import datetime, timedelta, timezone
from functools import wraps

from flask import current_app, g, request, session
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import AuthError, StorageError, ValidationFailure
from clinic_api.models import User
from clinic_api.services.graph_store import create_node, graph_session


logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    minutes = current_app.config.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60)
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(
        to_encode,
        current_app.config["SECRET_KEY"],
        algorithm=current_app.config.get("JWT_ALGORITHM", "HS256"),
    )


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        current_app.config["SECRET_KEY"],
        algorithms=[current_app.config.get("JWT_ALGORITHM", "HS256")],
    )


def register_user(username: str, password: str, role: str) -> dict:
    try:
        with graph_session() as db_session:
            if db_session.query(User).filter_by(username=username).first():
                raise ValidationFailure(
                    ValidationFailure.ALREADY_EXISTS, f"Username {username} is taken."
                )
            record = create_node(
                "User", username=username, password=get_password_hash(password), role=role
            ).to_record()
        logger.info(f"[register_user] Registered {username} as {role}")
        return record
    except SQLAlchemyError as e:
        logger.exception(f"[register_user] Failed for username={username}: {e}")
        raise StorageError("register_user") from e


def login_user(username: str, password: str) -> str:
    """Return a signed access token and keep it in the session cookie."""
    try:
        with graph_session() as db_session:
            user = db_session.query(User).filter_by(username=username).first()
            if user is None or not verify_password(password, user.password):
                raise AuthError("Invalid credentials")
            token = create_access_token(
                {"sub": user.id, "username": user.username, "role": user.role}
            )
    except SQLAlchemyError as e:
        logger.exception(f"[login_user] Failed for username={username}: {e}")
        raise StorageError("login_user") from e

    session["token"] = token
    return token


def logout_user() -> None:
    session.clear()


def _request_token() -> str | None:
    token = session.get("token")
    if token:
        return token
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return None


def login_required(roles=None):
    """Require a valid token from the session or a Bearer header; optionally restrict roles."""
    def decorator(view):
        @wraps(view)
        def wrapped(*args, **kwargs):
            token = _request_token()
            if not token:
                raise AuthError("No token provided", 401)
            try:
                claims = decode_access_token(token)
            except JWTError as e:
                logger.info(f"[login_required] Rejected token: {e}")
                raise AuthError("Invalid token", 403) from e
            if roles and claims.get("role") not in roles:
                raise AuthError("Forbidden", 403)
            g.user = claims
            return view(*args, **kwargs)
        return wrapped
    return decorator
