from .article import (
    ALL_CATEGORIES_KEY,
    DEFAULT_REGION,
    Article,
    Category,
    RegionCode,
    category_key,
    parse_category,
)
from .feed import FeedPage, FeedStatus, FetchTrigger, HistoryEntry

__all__ = [
    'ALL_CATEGORIES_KEY',
    'DEFAULT_REGION',
    'Article',
    'Category',
    'RegionCode',
    'category_key',
    'parse_category',
    'FeedPage',
    'FeedStatus',
    'FetchTrigger',
    'HistoryEntry',
]
