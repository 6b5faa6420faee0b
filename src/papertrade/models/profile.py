"""Profile model holding the user's current confidence score."""

from decimal import Decimal

from sqlalchemy import Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from papertrade.db.base import Base, TimestampMixin


class Profile(Base, TimestampMixin):
    """Paper-trading profile of a user.

    ``user_id`` is the identity issued by the external auth provider.
    ``assessment_score`` is the seed from the onboarding assessment and only
    changes when the assessment is submitted; every recalculation starts from
    it. ``confidence_score`` is the latest computed score and stays NULL until
    the assessment or the first recalculation.
    """

    __tablename__ = "profiles"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    assessment_score: Mapped[Decimal | None] = mapped_column(Numeric(3, 1), nullable=True)
    confidence_score: Mapped[Decimal | None] = mapped_column(Numeric(3, 1), nullable=True)
