from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func, false
from sqlalchemy.orm import relationship
from splitledger.db.session import Base

class Transaction(Base):
    __tablename__ = "group_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_group_transaction_amount_positive"),
    )

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("groups.id"), nullable=False, index=True)

    description = Column(String, nullable=True)
    amount = Column(Numeric(14, 2), nullable=False)
    date = Column(Date, nullable=True)
    paid_by = Column(Integer, nullable=False)
    split_type = Column(String, nullable=False, server_default="custom")
    notes = Column(Text, nullable=True)
    category_id = Column(String, nullable=True)

    is_settlement = Column(Boolean, nullable=False, server_default=false())
    is_deleted = Column(Boolean, nullable=False, server_default=false())

    created_by = Column(Integer, nullable=True)
    updated_by = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    version_id = Column(Integer, nullable=False)

    splits = relationship(
        "TransactionSplit",
        back_populates="transaction",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="TransactionSplit.user_id"
    )

    __mapper_args__ = {"version_id_col": version_id}

    @property
    def split_map(self):
        return {s.user_id: s.amount for s in self.splits}
