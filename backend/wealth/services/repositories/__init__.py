"""Repository layer - data access abstraction.

Repositories handle all database queries, providing a clean interface
for services. Services should use repositories for data access rather
than directly querying SQLAlchemy models.

Dependency direction: Services -> Repositories -> Models
"""

from .account_repository import AccountRepository
from .corporate_action_repository import CorporateActionRepository
from .exceptions import DuplicateError, NotFoundError, ReferenceInUseError, RepositoryError
from .price_repository import PriceRepository
from .security_repository import SecurityRepository

__all__ = [
    "AccountRepository",
    "CorporateActionRepository",
    "DuplicateError",
    "NotFoundError",
    "PriceRepository",
    "ReferenceInUseError",
    "RepositoryError",
    "SecurityRepository",
]
