"""Team aggregate: the team row plus its embedded membership records."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    Boolean,
    Text,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone

from .base import Base


class TeamMember(Base):
    """A user's membership in a team.

    Owned by its Team: created by add_member, deleted by remove_member or
    when the team itself is deleted. Never addressed on its own.
    """

    __tablename__ = "team_members"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member_user"),)

    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey("teams.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(String(50), nullable=False, default="Member")
    joined_date = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    user = relationship("User", foreign_keys=[user_id], lazy="joined")

    def to_dict(self):
        return {
            "user": self.user.to_summary() if self.user else self.user_id,
            "role": self.role,
            "joinedDate": self.joined_date.isoformat() if self.joined_date else None,
        }

    def __repr__(self):
        return f"<TeamMember(team_id={self.team_id}, user_id={self.user_id}, role={self.role})>"


class Team(Base):
    """Team within a department.

    ``member_count`` mirrors ``len(members)`` and ``version`` is the optimistic
    concurrency counter: every roster change rewrites the team row, so two
    writers racing on the same team cannot both pass the capacity check.
    """

    __tablename__ = "teams"
    __table_args__ = (
        UniqueConstraint("department_id", "code", name="uq_team_department_code"),
    )

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    code = Column(String(20), nullable=False)
    description = Column(Text, nullable=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=False, index=True)
    team_manager_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    team_leader_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)
    max_size = Column(Integer, nullable=False, default=10)
    member_count = Column(Integer, nullable=False, default=0)
    version = Column(Integer, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    updated_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    department = relationship("Department", lazy="joined")
    team_manager = relationship("User", foreign_keys=[team_manager_id], lazy="joined")
    team_leader = relationship("User", foreign_keys=[team_leader_id], lazy="joined")
    members = relationship(
        "TeamMember",
        cascade="all, delete-orphan",
        order_by="TeamMember.id",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_full(self):
        return len(self.members) >= self.max_size

    def find_member(self, user_id):
        """Return the membership record for ``user_id`` or None."""
        for member in self.members:
            if member.user_id == int(user_id):
                return member
        return None

    def to_dict(self, include_members=True):
        """Convert team to dictionary."""
        data = {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "description": self.description,
            "department": self.department.to_summary() if self.department else self.department_id,
            "teamManager": self.team_manager.to_summary() if self.team_manager else None,
            "teamLeader": self.team_leader.to_summary() if self.team_leader else None,
            "maxSize": self.max_size,
            "currentSize": self.member_count,
            "isActive": self.is_active,
            "createdBy": self.created_by,
            "updatedBy": self.updated_by,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_members:
            data["members"] = [member.to_dict() for member in self.members]
        return data

    def __repr__(self):
        return f"<Team(id={self.id}, code={self.code}, members={self.member_count}/{self.max_size})>"
