import enum
import uuid
import datetime
from sqlalchemy import String, DateTime, Uuid, func, Enum as SAEnum
from sqlalchemy.orm import relationship, Mapped, mapped_column

from app.services.database import Base

class UserRole(str, enum.Enum):
    ARTIST = "ARTIST"
    LABEL = "LABEL"
    TEAM = "TEAM"
    ADMIN = "ADMIN"

class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    email: Mapped[str | None] = mapped_column(String(320), unique=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(255))
    last_name: Mapped[str | None] = mapped_column(String(255))
    profile_image_url: Mapped[str | None] = mapped_column(String)
    google_id: Mapped[str | None] = mapped_column(String(255), unique=True)

    # The only source of admin capability.
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, native_enum=False, length=16, validate_strings=True),
        default=UserRole.ARTIST,
        nullable=False,
    )

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    memberships = relationship("OrgMember", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
