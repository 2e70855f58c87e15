"""Request dependencies: service lookups and bearer-token authentication."""
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from brandstore.accounts.admins import AdminAccounts
from brandstore.accounts.customers import CustomerAccounts
from brandstore.auth.tokens import Identity, TokenIssuer
from brandstore.catalog.lifecycle import CatalogLifecycle
from brandstore.core.errors import Unauthorized
from brandstore.inventory.stock import StockLedger
from brandstore.orders.aggregation import OrderService
from brandstore.payments.razorpay import RazorpayGateway
from brandstore.utils.logger import get_logger

logger = get_logger("api.deps")

bearer_scheme = HTTPBearer(auto_error=False)


def get_lifecycle(request: Request) -> CatalogLifecycle:
    return request.app.state.lifecycle


def get_customers(request: Request) -> CustomerAccounts:
    return request.app.state.customers


def get_admins(request: Request) -> AdminAccounts:
    return request.app.state.admins


def get_orders(request: Request) -> OrderService:
    return request.app.state.orders


def get_stock(request: Request) -> StockLedger:
    return request.app.state.stock


def get_payments(request: Request) -> RazorpayGateway:
    return request.app.state.payment_gateway


def get_tokens(request: Request) -> TokenIssuer:
    return request.app.state.tokens


def require_customer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_tokens),
) -> Identity:
    """Reject the request with 401 unless it carries a valid bearer token."""
    return tokens.verify(credentials.credentials if credentials else None)


def optional_customer(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_tokens),
) -> Optional[Identity]:
    """Identity of the caller if a valid token is present; guests get None."""
    if credentials is None:
        return None
    try:
        return tokens.verify(credentials.credentials)
    except Unauthorized as e:
        logger.info(f"Ignoring unusable bearer token on guest route: {e.message}")
        return None
