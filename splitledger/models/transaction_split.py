from sqlalchemy import Column, ForeignKey, Integer, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship
from splitledger.db.session import Base

class TransactionSplit(Base):
    __tablename__ = "transaction_splits"
    __table_args__ = (
        UniqueConstraint("transaction_id", "user_id", name="uq_transaction_split_user"),
    )

    id = Column(Integer, primary_key=True)
    transaction_id = Column(
        Integer,
        ForeignKey("group_transactions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    user_id = Column(Integer, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)

    transaction = relationship("Transaction", back_populates="splits")
