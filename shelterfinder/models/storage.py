from sqlalchemy import Text
from sqlmodel import SQLModel, Field, Column, DateTime
from datetime import datetime, timezone

class StorageEntry(SQLModel, table=True):
    """One key-value pair of the local shelter store"""

    key: str = Field(primary_key=True)
    value: str = Field(sa_column=Column(Text, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        sa_column=Column(DateTime(timezone=True))
    )
