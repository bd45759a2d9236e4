import datetime
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Annotated, Callable, Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, ExpiredSignatureError, JWTError
from passlib.context import CryptContext

from postboard.config import config
from postboard.domain import exceptions, model
from postboard.service_layer import unit_of_work

logger = logging.getLogger(__name__)

# auto_error is off so a missing header surfaces as MissingToken
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/token", auto_error=False)

pwd_context = CryptContext(schemes=["bcrypt"])


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class TokenConfig:
    secret_key: str
    algorithm: str = "HS256"
    ttl: datetime.timedelta = datetime.timedelta(hours=100)

    @classmethod
    def from_settings(cls, settings) -> "TokenConfig":
        if not settings.SECRET_KEY:
            raise RuntimeError("SECRET_KEY is not configured")
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.TOKEN_ALGORITHM,
            ttl=datetime.timedelta(hours=settings.TOKEN_TTL_HOURS),
        )


class TokenService:
    """Issues and verifies signed, time-limited bearer tokens carrying a user id."""

    def __init__(
        self,
        token_config: TokenConfig,
        clock: Callable[[], datetime.datetime] = _utcnow,
    ) -> None:
        self.config = token_config
        self.clock = clock

    def issue(self, user_id: int) -> str:
        issued_at = self.clock()
        jwt_data = {
            "sub": str(user_id),
            "iat": issued_at,
            "exp": issued_at + self.config.ttl,
            "type": "access",
        }
        return jwt.encode(jwt_data, self.config.secret_key, algorithm=self.config.algorithm)

    def verify(self, token: str) -> int:
        try:
            payload = jwt.decode(
                token, key=self.config.secret_key, algorithms=[self.config.algorithm]
            )
        except ExpiredSignatureError as e:
            raise exceptions.InvalidToken("Token has expired") from e
        except JWTError as e:
            raise exceptions.InvalidToken("Invalid token") from e

        if payload.get("type") != "access":
            raise exceptions.InvalidToken("Token has incorrect type, expected 'access'")

        try:
            return int(payload["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise exceptions.InvalidToken("Token is missing a valid 'sub' field") from e


@lru_cache()
def get_token_service() -> TokenService:
    return TokenService(TokenConfig.from_settings(config))


def get_password_hash(password: str) -> str:
    # bcrypt has a 72-byte limit; truncate to prevent errors
    password_bytes = password.encode('utf-8')[:72]
    return pwd_context.hash(password_bytes)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    # bcrypt has a 72-byte limit; truncate to match hashing behavior
    password_bytes = plain_password.encode('utf-8')[:72]
    return pwd_context.verify(password_bytes, hashed_password)


def authenticate_user(
    uow: unit_of_work.AbstractUnitOfWork, email: str, password: str
) -> model.UserAggregate:
    with uow:
        user = uow.users.get_by_email(email)

    if not user or not user.password_hash:
        raise exceptions.Unauthorized("Invalid email or password")

    if not verify_password(password, user.password_hash):
        raise exceptions.Unauthorized("Invalid email or password")

    return user


#Auth gate: every post route depends on this, so a bad token never reaches the bus
async def get_current_user_id(
    request: Request,
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
) -> int:
    if not token:
        raise exceptions.MissingToken("No token, authorization denied")

    user_id = token_service.verify(token)
    request.state.user_id = user_id
    logger.debug(f"Authenticated request for user_id={user_id}")
    return user_id
