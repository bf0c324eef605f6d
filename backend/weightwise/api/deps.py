"""Shared API dependencies — single import point for all routers.

Re-exports database session, authentication, and billing dependencies so
that router modules can import everything they need from one place::

    from weightwise.api.deps import get_db, get_current_active_user
"""

from weightwise.auth.dependencies import (
    get_current_active_user,
    get_current_user,
)
from weightwise.billing.dependencies import (
    get_user_subscription,
    require_premium,
)
from weightwise.billing.paystack_client import get_paystack_client
from weightwise.database import get_db, get_session_factory

__all__ = [
    "get_db",
    "get_session_factory",
    "get_current_user",
    "get_current_active_user",
    "get_user_subscription",
    "require_premium",
    "get_paystack_client",
]
