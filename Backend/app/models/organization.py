import enum
import uuid
import datetime
from sqlalchemy import String, Integer, ForeignKey, DateTime, Uuid, func, UniqueConstraint
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base

class OrgType(str, enum.Enum):
    ARTIST_ORG = "ARTIST_ORG"
    LABEL = "LABEL"

class MemberRole(str, enum.Enum):
    OWNER = "OWNER"
    MANAGER = "MANAGER"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"

# Member roles allowed to change catalog data.
EDITING_ROLES = {MemberRole.OWNER, MemberRole.MANAGER, MemberRole.EDITOR}
# Member roles allowed to manage the member list.
MANAGING_ROLES = {MemberRole.OWNER, MemberRole.MANAGER}

class Organization(Base):
    __tablename__ = "organizations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default=OrgType.ARTIST_ORG.value)
    balance: Mapped[int] = mapped_column(Integer, default=0)  # cents
    plan_type: Mapped[str] = mapped_column(String(20), default="FREE")
    # Stored for billing; release creation does not check it.
    monthly_release_limit: Mapped[int] = mapped_column(Integer, default=2)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    members = relationship("OrgMember", back_populates="organization", cascade="all, delete-orphan")
    artists = relationship("Artist", back_populates="organization")
    releases = relationship("Release", back_populates="organization")

class OrgMember(Base):
    __tablename__ = "org_members"
    __table_args__ = (UniqueConstraint("org_id", "user_id", name="uq_org_member"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("organizations.id"), index=True, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("users.id"), index=True, nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=MemberRole.OWNER.value)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    organization = relationship("Organization", back_populates="members")
    user = relationship("User", back_populates="memberships")
