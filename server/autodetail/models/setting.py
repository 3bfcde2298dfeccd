"""Key/value business settings editable without a deploy."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base, TimestampMixin

DEPOSIT_PERCENTAGE_KEY = "deposit_percentage"


class SiteSetting(TimestampMixin, Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str] = mapped_column(String(1024), nullable=False)

    def __repr__(self) -> str:
        return f"<SiteSetting(key='{self.key}', value='{self.value}')>"
