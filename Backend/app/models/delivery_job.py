import enum
import uuid
import datetime
from sqlalchemy import String, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base, JSONType

class DeliveryStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"

# Every approved release gets one job per target, in this order.
DELIVERY_TARGETS = ("SPOTIFY", "APPLE", "YT_MUSIC")

class DeliveryJob(Base):
    __tablename__ = "delivery_jobs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    release_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("releases.id"), index=True, nullable=False)
    target: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(16), default=DeliveryStatus.PENDING.value, index=True)

    # Opaque blobs owned by the delivery worker.
    payload: Mapped[dict | None] = mapped_column(JSONType)
    response: Mapped[dict | None] = mapped_column(JSONType)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    release = relationship("Release", back_populates="delivery_jobs")
