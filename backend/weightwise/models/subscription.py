"""Subscription model — premium plan state per user."""

import uuid
from datetime import datetime

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from weightwise.database import Base, TimestampMixin, UUIDPrimaryKeyMixin


class Subscription(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Tracks a user's plan tier and the last Paystack charge applied to it."""

    __tablename__ = "subscriptions"

    # Foreign key — one subscription per user (UNIQUE enforces one-to-one)
    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
        index=True,
    )

    # Plan & status
    plan: Mapped[str] = mapped_column(String(50), nullable=False, default="free", server_default="free")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active", server_default="active")
    billing_cycle: Mapped[str | None] = mapped_column(String(20), nullable=True)

    # Paystack bookkeeping (audit only)
    last_transaction_ref: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_transaction_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    subscription_updated_at: Mapped[datetime | None] = mapped_column(nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="subscription", lazy="selectin")  # type: ignore[name-defined]  # noqa: F821

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, user_id={self.user_id}, plan={self.plan}, status={self.status})>"
