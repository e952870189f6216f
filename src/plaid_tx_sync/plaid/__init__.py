from .client import PLAID_ENV_URLS, PlaidClient

__all__ = ["PlaidClient", "PLAID_ENV_URLS"]
