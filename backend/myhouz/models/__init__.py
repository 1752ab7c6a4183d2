from .auth import User, SessionToken
from .registers import Register
from .loyalty import LoyaltyProgram, LoyaltyHistoryEntry
from .suppliers import Supplier, SupplierCategory
from .reviews import Review
from .ideabooks import Ideabook, IdeabookItem, IdeabookCollaborator, IdeabookTag

__all__ = [
    'User', 'SessionToken',
    'Register',
    'LoyaltyProgram', 'LoyaltyHistoryEntry',
    'Supplier', 'SupplierCategory',
    'Review',
    'Ideabook', 'IdeabookItem', 'IdeabookCollaborator', 'IdeabookTag',
]
