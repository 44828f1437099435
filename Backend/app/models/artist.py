import uuid
from sqlalchemy import Column, String, ForeignKey, DateTime, Uuid, func
from sqlalchemy.orm import relationship

from app.services.database import Base

class Artist(Base):
    __tablename__ = "artists"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, ForeignKey("organizations.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    upc_prefix = Column(String(11), nullable=True)  # leading digits for generated UPCs
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="artists")

    # An artist can have many releases (one-to-many relationship)
    releases = relationship("Release", back_populates="artist")
