"""Credit Package Repository Interface

Read access to precomputed Creative Boost package summaries.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.credit_package import CreditPackageMonth


class CreditPackageRepository(ABC):
    """Repository interface for CreditPackageMonth lookups"""

    @abstractmethod
    async def get_for_client_month(
        self, client_id: str, year: int, month: int
    ) -> Optional[CreditPackageMonth]:
        """
        Retrieve a client's package for a month

        Args:
            client_id: Client identifier
            year: Year
            month: Month (1-12)

        Returns:
            CreditPackageMonth if the client has a package that month, None otherwise
        """
        pass

    @abstractmethod
    async def list_for_month(self, year: int, month: int) -> List[CreditPackageMonth]:
        """
        List every client package for a month

        Args:
            year: Year
            month: Month (1-12)

        Returns:
            List of package months
        """
        pass
