"""Client Domain Entity

Read-only view of a CRM client, used for display names on issued invoices.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import Field, Column
from sqlalchemy import String
from src.domain.base import BaseModel, generate_uuid


class Client(BaseModel, table=True):
    """
    Client - Agency customer owning one or more engagements

    Domain Rules:
    - brand_name, when set, is preferred over the legal name for display
    """

    __tablename__ = "clients"

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Client identifier"
    )

    name: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Legal name of the client"
    )

    brand_name: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="Brand name used for display"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Client creation timestamp"
    )

    @property
    def display_name(self) -> str:
        return self.brand_name or self.name
