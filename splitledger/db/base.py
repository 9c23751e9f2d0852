# Import every model so Base.metadata knows all tables (alembic, create_all).
from splitledger.db.session import Base
from splitledger.models.group import Group
from splitledger.models.group_member import GroupMember
from splitledger.models.transaction import Transaction
from splitledger.models.transaction_split import TransactionSplit

__all__ = ["Base", "Group", "GroupMember", "Transaction", "TransactionSplit"]
