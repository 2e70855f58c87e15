"""Customer account endpoints (/api/customers)."""
from fastapi import APIRouter, Depends

from brandstore.accounts.customers import CustomerAccounts
from brandstore.api.deps import get_customers, require_customer
from brandstore.api.models import LoginRequest
from brandstore.api.uploads import FormSubmission, intercept_uploads
from brandstore.auth.tokens import Identity
from brandstore.catalog.entities import CUSTOMER

router = APIRouter(prefix="/api/customers", tags=["customers"])

profile_form = intercept_uploads(CUSTOMER.folder, list(CUSTOMER.image_slots))


@router.post("/register", status_code=201)
async def register_customer(
    submission: FormSubmission = Depends(profile_form),
    customers: CustomerAccounts = Depends(get_customers),
):
    result = await customers.register(submission.fields, submission.uploads)
    return {
        "success": True,
        "message": "User registered successfully",
        "id": result.id,
        "profile_url": result.references.get("profile_url"),
    }


@router.post("/login")
def login_customer(request: LoginRequest, customers: CustomerAccounts = Depends(get_customers)):
    session = customers.login(request.email, request.password)
    return {"success": True, "message": "Login successful", **session}


@router.get("/profile")
def get_profile(
    identity: Identity = Depends(require_customer),
    customers: CustomerAccounts = Depends(get_customers),
):
    return {"success": True, "user": customers.get_profile(identity.user_id)}


@router.put("/profile")
async def update_profile(
    identity: Identity = Depends(require_customer),
    submission: FormSubmission = Depends(profile_form),
    customers: CustomerAccounts = Depends(get_customers),
):
    # Auth is resolved before the upload dependency, so rejected callers store nothing
    await customers.update_profile(identity.user_id, submission.fields, submission.uploads)
    return {
        "success": True,
        "message": "Profile updated successfully",
        "user": customers.get_profile(identity.user_id),
    }
