import enum
import uuid
import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Uuid, func, Enum as SAEnum
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base, JSONType

class ReleaseType(str, enum.Enum):
    SINGLE = "SINGLE"
    EP = "EP"
    ALBUM = "ALBUM"

class ReleaseStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    IN_REVIEW = "IN_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    DELIVERING = "DELIVERING"
    DELIVERED = "DELIVERED"
    TAKEDOWN = "TAKEDOWN"

# Statuses in which the owning organization may still edit the release.
EDITABLE_STATUSES = {ReleaseStatus.DRAFT, ReleaseStatus.REJECTED}

class Release(Base):
    __tablename__ = "releases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id"), index=True, nullable=False)
    artist_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("artists.id"), index=True, nullable=False)

    type: Mapped[ReleaseType] = mapped_column(
        SAEnum(ReleaseType, native_enum=False, length=16, validate_strings=True), nullable=False
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    upc: Mapped[str | None] = mapped_column(String(12), unique=True)
    primary_genre: Mapped[str | None] = mapped_column(String(100))
    secondary_genre: Mapped[str | None] = mapped_column(String(100))
    language: Mapped[str | None] = mapped_column(String(50))
    album_version: Mapped[str | None] = mapped_column(String(100))
    original_release_date: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    release_date: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True))
    release_time: Mapped[str | None] = mapped_column(String(5))  # HH:MM
    sub_label: Mapped[str | None] = mapped_column(String(255))

    status: Mapped[ReleaseStatus] = mapped_column(
        SAEnum(ReleaseStatus, native_enum=False, length=16, validate_strings=True),
        default=ReleaseStatus.DRAFT,
        nullable=False,
        index=True,
    )

    territories: Mapped[list] = mapped_column(JSONType, default=list)
    rights_owner: Mapped[str | None] = mapped_column(String(255))

    artwork_url: Mapped[str | None] = mapped_column(String)
    artwork_original_name: Mapped[str | None] = mapped_column(String(255))
    artwork_size: Mapped[int | None] = mapped_column(Integer)  # bytes
    artwork_width: Mapped[int | None] = mapped_column(Integer)
    artwork_height: Mapped[int | None] = mapped_column(Integer)

    label_name: Mapped[str | None] = mapped_column(String(255))
    p_copyright: Mapped[str | None] = mapped_column(String(255))
    performers: Mapped[list | None] = mapped_column(JSONType)  # [{name, role}]

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    organization = relationship("Organization", back_populates="releases")
    artist = relationship("Artist", back_populates="releases")

    # A release has many tracks, always kept in track_index order
    tracks = relationship(
        "Track",
        back_populates="release",
        cascade="all, delete-orphan",
        order_by="Track.track_index",
    )
    split_shares = relationship("SplitShare", back_populates="release", cascade="all, delete-orphan")
    qc_items = relationship("QCItem", back_populates="release", cascade="all, delete-orphan")
    delivery_jobs = relationship("DeliveryJob", back_populates="release", cascade="all, delete-orphan")
