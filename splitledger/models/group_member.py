from sqlalchemy import Boolean, Column, ForeignKey, Integer, DateTime, Numeric, String, UniqueConstraint, func, true
from splitledger.db.session import Base
from sqlalchemy.orm import relationship

class GroupMember(Base):
    __tablename__ = "group_members"
    __table_args__ = (
        UniqueConstraint("group_id", "user_id", name="uq_group_member_user"),
    )

    id = Column(Integer, primary_key=True, index=True)

    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False)
    role = Column(String, nullable=False, server_default="member")

    # only ever changed through splitledger.services.ledger
    balance = Column(Numeric(14, 2), nullable=False, server_default="0")

    is_active = Column(Boolean, nullable=False, server_default=true())
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("Group", back_populates="members")
