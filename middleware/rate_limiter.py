from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from jose import jwt, JWTError
from core.config import settings

def get_client_key(request: Request):
    """Rate-limit signed-in customers by account, everyone else by IP."""
    token = request.headers.get("Authorization")
    if token:
        try:
            token = token.replace("Bearer ", "")
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
            subject = payload.get("sub")
            if subject:
                return str(subject)
        except JWTError:
            pass

    return get_remote_address(request)

limiter = Limiter(
    key_func=get_client_key,
    default_limits=["300/hour"],
    enabled=settings.ENV != "testing"
)
