"""SQLAlchemy models for WeightWise.

All models are imported here so that Alembic's autogenerate can discover
them via Base.metadata. If you add a new model, import it in this file.
"""

from weightwise.models.subscription import Subscription
from weightwise.models.user import User

__all__ = [
    "Subscription",
    "User",
]
