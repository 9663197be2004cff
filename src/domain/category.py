"""Category domain model."""

from pydantic import BaseModel, Field

from src.core.config import Constants
from src.domain.timestamps import UtcDatetime, utc_now


class Category(BaseModel):
    """Grouping for maintenance tasks (Home, Car, ...)."""

    id: str = Field(..., description="Unique category ID")
    name: str = Field(..., min_length=1, max_length=Constants.CATEGORY_NAME_MAX_LENGTH, description="Category name")
    icon: str | None = Field(
        default=None, max_length=Constants.CATEGORY_ICON_MAX_LENGTH, description="Optional icon (usually an emoji)"
    )
    created: UtcDatetime = Field(default_factory=utc_now, description="Creation timestamp")
    is_default: bool = Field(default=False, description="Built-in categories cannot be deleted")
