"""Extra Work Repository Interface

Access to the extra work queue.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.extra_work import ExtraWork


class ExtraWorkRepository(ABC):
    """Repository interface for ExtraWork persistence"""

    @abstractmethod
    async def get_by_id(self, extra_work_id: str) -> Optional[ExtraWork]:
        """
        Retrieve extra work by ID

        Args:
            extra_work_id: Extra work identifier

        Returns:
            ExtraWork if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_ready_to_invoice(self, year: int, month: int) -> List[ExtraWork]:
        """
        List extra work ready to be billed in the given month

        Args:
            year: Billing year
            month: Billing month (1-12)

        Returns:
            Items with status=ready_to_invoice and billing_period=YYYY-MM
        """
        pass

    @abstractmethod
    async def update(self, extra_work: ExtraWork) -> ExtraWork:
        """
        Persist changes to an extra work item

        Args:
            extra_work: Item with updated values

        Returns:
            Updated item
        """
        pass
