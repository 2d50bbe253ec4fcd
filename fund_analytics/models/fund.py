"""Fund profile and NAV observation models.

Rows are written by the ingestion side (see services.nav_loader) and are
read-only for the analytics services.
"""

from datetime import date, datetime
from decimal import Decimal
from sqlalchemy import Date, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from fund_analytics.models.database import Base


class FundProfile(Base):
    __tablename__ = "fund_profile"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    name: Mapped[str] = mapped_column(String(200))
    short_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    manager: Mapped[str | None] = mapped_column(String(200), nullable=True)
    risk_level: Mapped[int | None] = mapped_column(Integer, nullable=True)  # 1-5
    fund_type: Mapped[str | None] = mapped_column(String(100), nullable=True)
    nav_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    nav_frequency: Mapped[str | None] = mapped_column(String(10), nullable=True)  # "D" = daily
    updated_at: Mapped[str] = mapped_column(
        String(30), default=lambda: datetime.now().isoformat()
    )


class FundNav(Base):
    __tablename__ = "fund_nav"

    fund_id: Mapped[int] = mapped_column(
        ForeignKey("fund_profile.id"), primary_key=True
    )
    nav_date: Mapped[date] = mapped_column(Date, primary_key=True)
    unit_nav: Mapped[Decimal] = mapped_column(Numeric(18, 6))
    accumulated_nav: Mapped[Decimal | None] = mapped_column(Numeric(18, 6), nullable=True)
