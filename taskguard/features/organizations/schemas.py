"""
Pydantic schemas for organizations.
"""
from pydantic import BaseModel, ConfigDict


class OrganizationPublic(BaseModel):
    """Lightweight organization reference."""
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)
