"""
Profile mutation client.
Page controllers driving the RPC surface over httpx.
"""

from .api_client import ApiClient
from .context import ClientContext
from .controllers import PostModalController, ProfileCardController, ProfileSettingsController
from .optimistic import OptimisticMutation
from .query_cache import QueryCache, query_key

__all__ = [
    "ApiClient",
    "ClientContext",
    "ProfileSettingsController",
    "ProfileCardController",
    "PostModalController",
    "OptimisticMutation",
    "QueryCache",
    "query_key",
]
