"""
Login endpoint (login or automatic registration).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.dependencies import get_store_provider
from app.api.models.user import LoginRequest, LoginResponse, UserPayload
from app.core.errors import InvalidInput, StoreUnavailable
from app.core.store import StoreProvider
from app.core.users import LoginService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, provider: StoreProvider = Depends(get_store_provider)):
    """Find the user matching the credentials, registering it if new."""
    try:
        with provider.store_scope() as store:
            user = LoginService(store).login_or_register(body.username, body.password)
    except InvalidInput:
        raise HTTPException(status_code=400, detail="Username e senha são obrigatórios")
    except StoreUnavailable:
        logger.exception("Login failed for %r", body.username)
        raise HTTPException(status_code=500, detail="Erro ao realizar login")
    return LoginResponse(
        success=True,
        message="Login realizado com sucesso",
        user=UserPayload(username=user.username, userId=user.user_id),
    )
