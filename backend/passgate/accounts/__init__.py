"""Account records, persistence and the Accounts service."""

from passgate.accounts.json_store import JsonAccountStore
from passgate.accounts.models import Account, AuthResult
from passgate.accounts.service import Accounts
from passgate.accounts.store import AccountStore

__all__ = [
    "Account",
    "AccountStore",
    "Accounts",
    "AuthResult",
    "JsonAccountStore",
]
