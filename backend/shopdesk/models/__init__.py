from .auth import User, SessionToken
from .inventory import OnHoldItem, ActiveItem
from .sales import Sale, SaleLine

__all__ = [
    'User', 'SessionToken',
    'OnHoldItem', 'ActiveItem',
    'Sale', 'SaleLine',
]
