import enum
import uuid
import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from app.services.database import Base

class ReportSource(str, enum.Enum):
    SPOTIFY = "SPOTIFY"
    APPLE = "APPLE"
    YT_MUSIC = "YT_MUSIC"
    DEEZER = "DEEZER"
    TIKTOK = "TIKTOK"
    IG = "IG"
    SHORTS = "SHORTS"
    OTHER = "OTHER"

class ReportRow(Base):
    __tablename__ = "report_rows"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id"), index=True, nullable=False)
    period: Mapped[str] = mapped_column(String(7), index=True, nullable=False)  # "2025-01"
    source: Mapped[str] = mapped_column(String(16), nullable=False)
    territory: Mapped[str] = mapped_column(String(2), nullable=False)
    upc: Mapped[str | None] = mapped_column(String(12))
    isrc: Mapped[str | None] = mapped_column(String(15))
    units: Mapped[int] = mapped_column(Integer, default=0)
    revenue_cents: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
