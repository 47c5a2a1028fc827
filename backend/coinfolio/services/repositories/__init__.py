"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

The Repository pattern separates data access from business logic:
- Repositories: Pure data access (queries, creates, updates)
- Services: Business logic that uses repositories

Dependency direction: Services -> Repositories -> Models

Every query on user-owned rows takes the owner id, so ownership is enforced
here and not only in the routers.
"""

from .exceptions import DuplicateError, ForbiddenError, NotFoundError, RepositoryError
from .holding_repository import HoldingRepository
from .transaction_repository import TransactionRepository
from .user_repository import UserRepository
from .watchlist_repository import WatchlistRepository

__all__ = [
    "DuplicateError",
    "ForbiddenError",
    "HoldingRepository",
    "NotFoundError",
    "RepositoryError",
    "TransactionRepository",
    "UserRepository",
    "WatchlistRepository",
]
