from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class Category(str, Enum):
    TECHNOLOGY = "technology"
    SPORTS = "sports"
    POLITICS = "politics"
    BUSINESS = "business"
    ENTERTAINMENT = "entertainment"
    HEALTH = "health"
    SCIENCE = "science"
    EDUCATION = "education"
    ENVIRONMENT = "environment"
    FOOD = "food"
    TRAVEL = "travel"
    FASHION = "fashion"
    AUTOMOTIVE = "automotive"
    GAMING = "gaming"
    CRYPTOCURRENCY = "cryptocurrency"

    @property
    def label(self) -> str:
        return self.value.capitalize()


# Key used for the "All News" feed, where no category is selected
ALL_CATEGORIES_KEY = "all"


class RegionCode(str, Enum):
    US = "us"
    GB = "gb"
    CA = "ca"
    AU = "au"
    IN = "in"
    IE = "ie"
    NZ = "nz"
    ZA = "za"
    DE = "de"
    FR = "fr"
    IT = "it"
    JP = "jp"
    KR = "kr"
    BR = "br"
    MX = "mx"


DEFAULT_REGION = RegionCode.US


def category_key(category: Optional[Category]) -> str:
    """History/log key for a category filter; the unselected filter maps to ``all``."""
    return category.value if category is not None else ALL_CATEGORIES_KEY


def parse_category(value: Union[str, Category, None]) -> Optional[Category]:
    """Accepts a Category, its value, or ``None``/``"all"``/``""`` for the unselected filter."""
    if value is None or isinstance(value, Category):
        return value
    normalized = value.strip().lower()
    if normalized in ("", ALL_CATEGORIES_KEY):
        return None
    return Category(normalized)


class Article(BaseModel):
    """A single fetched article. Never mutated after it leaves the feed client."""
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    source: str
    category: Optional[Category] = None
    region: RegionCode
    published_at: Optional[datetime] = None
    summary: Optional[str] = None
    url: Optional[str] = None
    image_url: Optional[str] = None
