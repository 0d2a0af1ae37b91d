"""
Remote feed clients: fetch exactly one page of articles per call.

No retries happen here; the orchestrator decides when to fetch again.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import httpx
import structlog

from ...exceptions import EmptyResultError, NetworkError, UpstreamError, ValidationError
from ..models import Category, FeedPage, RegionCode, category_key
from .article_mapper import ArticleMapper

logger = structlog.get_logger(__name__)

# Categories the upstream filters natively; everything else becomes a keyword query
NATIVE_CATEGORIES = frozenset({
    Category.BUSINESS,
    Category.ENTERTAINMENT,
    Category.HEALTH,
    Category.SCIENCE,
    Category.SPORTS,
    Category.TECHNOLOGY,
})


class RemoteFeedClient(ABC):
    """Contract for fetching one page of a category/region feed"""

    @abstractmethod
    async def fetch(
        self,
        category: Optional[Category],
        region: RegionCode,
        page: int,
        page_size: int,
    ) -> FeedPage:
        """
        Fetch a single page.

        Raises:
            NetworkError: transport failure or timeout
            UpstreamError: non-success response
            EmptyResultError: the page holds no articles
        """

    async def aclose(self) -> None:
        """Release transport resources"""


def validate_page_request(page: int, page_size: int) -> None:
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}", details={"page": page})
    if page_size < 1:
        raise ValidationError(f"page_size must be > 0, got {page_size}", details={"page_size": page_size})


class NewsApiFeedClient(RemoteFeedClient):
    """Top-headlines client for NewsAPI-compatible endpoints."""

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        mapper: Optional[ArticleMapper] = None,
    ):
        self.base_url = base_url
        self.api_key = api_key
        self.timeout = timeout
        self.client = client or httpx.AsyncClient(timeout=timeout)
        self.mapper = mapper or ArticleMapper()
        logger.info("Feed client initialized", base_url=self.base_url, timeout=self.timeout)

    @classmethod
    def from_settings(cls, settings) -> "NewsApiFeedClient":
        return cls(
            base_url=settings.news_api_url,
            api_key=settings.news_api_key,
            timeout=settings.news_request_timeout_seconds,
        )

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    def build_params(
        self,
        category: Optional[Category],
        region: RegionCode,
        page: int,
        page_size: int,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "country": region.value,
            "page": page,
            "pageSize": page_size,
        }
        if category is None:
            return params
        if category in NATIVE_CATEGORIES:
            params["category"] = category.value
        else:
            params["q"] = category.value
        return params

    async def fetch(
        self,
        category: Optional[Category],
        region: RegionCode,
        page: int,
        page_size: int,
    ) -> FeedPage:
        validate_page_request(page, page_size)
        params = self.build_params(category, region, page, page_size)
        context = {"category": category_key(category), "region": region.value, "page": page}

        try:
            response = await asyncio.wait_for(
                self.client.get(self.base_url, params=params, headers=self._get_headers()),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.warning("Feed request timed out", timeout=self.timeout, **context)
            raise NetworkError(f"Request timed out after {self.timeout}s", details=context) from e
        except httpx.HTTPError as e:
            logger.warning("Feed request failed", error=str(e), **context)
            raise NetworkError(f"Network error: {e}", details=context) from e

        payload = self._parse_payload(response, context)
        raw_articles = payload.get("articles") or []
        if not isinstance(raw_articles, list):
            logger.warning("Feed upstream returned malformed articles", **context)
            raise UpstreamError(
                "Upstream returned malformed articles",
                status_code=response.status_code,
                details=context,
            )
        articles = self.mapper.map_articles(raw_articles, category, region)[:page_size]

        if not articles:
            raise EmptyResultError(details=context)

        logger.debug("Fetched feed page", articles=len(articles), **context)
        return FeedPage(category=category, region=region, page=page, articles=articles)

    def _parse_payload(self, response: httpx.Response, context: Dict[str, Any]) -> Dict[str, Any]:
        if not response.is_success:
            message = self._error_message(response) or response.reason_phrase
            logger.warning("Feed upstream error", status_code=response.status_code, message=message, **context)
            raise UpstreamError(
                f"Upstream returned {response.status_code}: {message}",
                status_code=response.status_code,
                details=context,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamError(
                "Upstream returned malformed JSON",
                status_code=response.status_code,
                details=context,
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamError("Upstream returned an unexpected payload", status_code=response.status_code, details=context)

        if payload.get("status") == "error":
            message = payload.get("message") or payload.get("code") or "unknown error"
            raise UpstreamError(f"Upstream error: {message}", status_code=response.status_code, details=context)

        return payload

    def _error_message(self, response: httpx.Response) -> Optional[str]:
        try:
            data = response.json()
        except ValueError:
            return None
        if isinstance(data, dict):
            return data.get("message")
        return None

    async def aclose(self) -> None:
        await self.client.aclose()
