from core.database import SessionLocal
from functools import lru_cache
from typing import Annotated
from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from jose import JWTError, jwt
from starlette import status
from core.config import settings
from services.courier_service import CourierClient
from services.ledger import JsonFileLedger, OrderLedger
from services.order_query_service import OrderQueryService
from services.order_service import OrderService
from services.order_store import OrderStore


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

db_dependency = Annotated[Session, Depends(get_db)]


@lru_cache
def get_ledger() -> OrderLedger:
    return JsonFileLedger(settings.LOCAL_LEDGER_PATH)


def get_courier() -> CourierClient:
    return CourierClient.from_settings()


def get_order_store(db: db_dependency) -> OrderStore:
    return OrderStore(db)


def get_order_service(store: Annotated[OrderStore, Depends(get_order_store)],
                      ledger: Annotated[OrderLedger, Depends(get_ledger)],
                      courier: Annotated[CourierClient, Depends(get_courier)]) -> OrderService:
    return OrderService(store, ledger=ledger, courier=courier,
                        ledger_write_fallback=settings.LEDGER_WRITE_FALLBACK)


def get_query_service(store: Annotated[OrderStore, Depends(get_order_store)],
                      ledger: Annotated[OrderLedger, Depends(get_ledger)]) -> OrderQueryService:
    return OrderQueryService(store, ledger=ledger)


store_dependency = Annotated[OrderStore, Depends(get_order_store)]
order_service_dependency = Annotated[OrderService, Depends(get_order_service)]
query_service_dependency = Annotated[OrderQueryService, Depends(get_query_service)]


def get_current_admin(token: Annotated[str, Depends(OAuth2PasswordBearer(tokenUrl="auth/token"))]):
    """
    Verify an access token issued by the hosted auth backend.

    Only the signature, expiry and role are checked here; sign-in itself
    happens at the backend.
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Could not validate credentials.")

    user_id = payload.get("sub")
    role = payload.get("role")

    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED,
                            detail="Could not validate credentials.")

    if role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN,
                            detail="Admin access required.")

    return {"user_id": user_id, "email": payload.get("email"), "role": role}


admin_dependency = Annotated[dict, Depends(get_current_admin)]
