import uuid
import datetime
from decimal import Decimal
from sqlalchemy import String, Numeric, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base

class SplitShare(Base):
    __tablename__ = "split_shares"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Attached to a release, a track, or both.
    release_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("releases.id"), index=True)
    track_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("tracks.id"), index=True)

    # Set when the collaborator already has an account; email always kept.
    user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id"))
    email: Mapped[str] = mapped_column(String(320), nullable=False)

    percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    role: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    release = relationship("Release", back_populates="split_shares")
    track = relationship("Track", back_populates="split_shares")
