import enum
import uuid
from sqlalchemy import Column, String, Integer, Boolean, Text, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship
from app.services.database import Base, JSONType

class TrackStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    READY = "READY"
    DELIVERED = "DELIVERED"

class Track(Base):
    __tablename__ = "tracks"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(255), nullable=False)
    isrc = Column(String(15), nullable=True)
    # 1-based and contiguous within a release; maintained by the catalog service.
    track_index = Column(Integer, nullable=False)
    explicit = Column(Boolean, default=False, nullable=False)

    audio_url = Column(String, nullable=True)
    audio_original_name = Column(String(255), nullable=True)
    audio_size = Column(Integer, nullable=True)  # bytes
    duration = Column(Integer, nullable=True)  # seconds

    lyrics = Column(Text, nullable=True)
    version = Column(String(100), nullable=True)  # "Original", "Radio Edit", ...
    participants = Column(JSONType, nullable=True)
    status = Column(String(16), default=TrackStatus.DRAFT.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Link to its parent release
    release_id = Column(Uuid, ForeignKey("releases.id"), nullable=False, index=True)
    release = relationship("Release", back_populates="tracks")

    split_shares = relationship("SplitShare", back_populates="track", cascade="all, delete-orphan")
