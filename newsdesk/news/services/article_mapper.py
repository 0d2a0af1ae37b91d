"""
Maps raw upstream article payloads to the standardized Article model
"""

import hashlib
from datetime import datetime
from typing import Any, Dict, List, Optional

import structlog
from pydantic import ValidationError as ModelValidationError

from ..models import Article, Category, RegionCode

logger = structlog.get_logger(__name__)

# Placeholder the upstream substitutes for articles taken down after indexing
REMOVED_MARKER = "[Removed]"


class ArticleMapper:
    """Turns top-headlines article dicts into Article instances"""

    def map_articles(
        self,
        raw_articles: List[Dict[str, Any]],
        category: Optional[Category],
        region: RegionCode,
    ) -> List[Article]:
        articles = []
        for raw in raw_articles:
            try:
                article = self.map_article(raw, category, region)
            except (TypeError, AttributeError, ModelValidationError) as e:
                logger.debug("Skipping malformed upstream article", error=str(e))
                continue
            if article is not None:
                articles.append(article)

        dropped = len(raw_articles) - len(articles)
        if dropped:
            logger.debug("Dropped unusable upstream articles", dropped=dropped)
        return articles

    def map_article(
        self,
        raw: Dict[str, Any],
        category: Optional[Category],
        region: RegionCode,
    ) -> Optional[Article]:
        """
        Map one raw article.

        Returns:
            The Article, or None when the payload has no usable title
        """
        if not isinstance(raw, dict):
            return None

        title = (raw.get("title") or "").strip()
        if not title or title == REMOVED_MARKER:
            return None

        source = self.extract_source(raw)
        url = raw.get("url") or None

        return Article(
            id=self.article_id(url, title, source),
            title=title,
            source=source,
            category=category,
            region=region,
            published_at=self.format_published_date(raw.get("publishedAt")),
            summary=self.clean_summary(raw.get("description") or raw.get("content")),
            url=url,
            image_url=raw.get("urlToImage") or None,
        )

    def extract_source(self, raw: Dict[str, Any]) -> str:
        source = raw.get("source")
        if isinstance(source, dict):
            name = source.get("name") or source.get("id")
        else:
            name = source
        return (name or "Unknown").strip() or "Unknown"

    def clean_summary(self, text: Optional[str]) -> Optional[str]:
        if not text:
            return None
        cleaned = " ".join(text.split())
        if cleaned == REMOVED_MARKER:
            return None
        return cleaned or None

    def article_id(self, url: Optional[str], title: str, source: str) -> str:
        seed = url or f"{source}|{title}"
        return hashlib.sha1(seed.encode("utf-8")).hexdigest()[:16]

    def format_published_date(self, date_str: Optional[str]) -> Optional[datetime]:
        if not date_str:
            return None

        value = date_str.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass

        for fmt in ('%Y-%m-%d %H:%M:%S', '%Y-%m-%d'):
            try:
                return datetime.strptime(value, fmt)
            except ValueError:
                continue

        logger.debug("Unparseable publish date", value=date_str)
        return None
