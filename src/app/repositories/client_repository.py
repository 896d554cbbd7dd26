"""Client Repository Interface

Read access to the CRM client directory.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.client import Client


class ClientRepository(ABC):
    """Repository interface for Client lookups"""

    @abstractmethod
    async def get_by_id(self, client_id: str) -> Optional[Client]:
        """
        Retrieve client by ID

        Args:
            client_id: Client identifier

        Returns:
            Client if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_by_ids(self, client_ids: List[str]) -> List[Client]:
        """
        Retrieve several clients at once

        Args:
            client_ids: Client identifiers (unknown ids are skipped)

        Returns:
            List of found clients
        """
        pass
