import enum
import uuid
import datetime
from sqlalchemy import String, Text, Boolean, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base

class QCSeverity(str, enum.Enum):
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

class QCItem(Base):
    __tablename__ = "qc_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    release_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("releases.id"), index=True, nullable=False)
    track_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tracks.id", ondelete="SET NULL"))
    severity: Mapped[str] = mapped_column(String(8), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    resolved: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    release = relationship("Release", back_populates="qc_items")
