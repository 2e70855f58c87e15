"""Back-office login (/api/auth)."""
from fastapi import APIRouter, Depends

from brandstore.accounts.admins import AdminAccounts
from brandstore.api.deps import get_admins
from brandstore.api.models import AdminRegisterRequest, LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register_admin(request: AdminRegisterRequest, admins: AdminAccounts = Depends(get_admins)):
    user_id = admins.register(request.name, request.email, request.password)
    return {"success": True, "message": "User registered", "id": user_id}


@router.post("/login")
def login_admin(request: LoginRequest, admins: AdminAccounts = Depends(get_admins)):
    return {"success": True, **admins.login(request.email, request.password)}
