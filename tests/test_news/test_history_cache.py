from datetime import timedelta

import pytest

from newsdesk.news.models import Category, FeedPage, RegionCode
from newsdesk.news.services.history_cache import HistoryCache

from conftest import make_articles


def _page(category=None, count=12, prefix="story"):
    return FeedPage(
        category=category,
        region=RegionCode.US,
        page=1,
        articles=make_articles(count, category, prefix=prefix),
    )


class TestHistoryCache:

    def test_get_returns_added_page(self, history):
        page = _page(Category.TECHNOLOGY)

        history.add(Category.TECHNOLOGY, page)

        entry = history.get(Category.TECHNOLOGY)
        assert entry is not None
        assert entry.key == "technology"
        assert len(entry.page.articles) == 12

    def test_second_add_for_same_key_supersedes_first(self, history):
        history.add(Category.SPORTS, _page(Category.SPORTS, prefix="first"))
        history.add(Category.SPORTS, _page(Category.SPORTS, count=3, prefix="second"))

        entry = history.get(Category.SPORTS)
        assert [a.title for a in entry.page.articles] == ["Second 0", "Second 1", "Second 2"]
        assert len(history) == 1

    def test_unselected_category_uses_all_key(self, history):
        history.add(None, _page(None))

        assert history.get(None) is not None
        assert history.get("all") is history.get(None)

    def test_get_accepts_string_keys(self, history):
        history.add(Category.HEALTH, _page(Category.HEALTH))

        assert history.get("health") is not None
        assert history.get("HEALTH") is not None

    def test_get_missing_returns_none(self, history):
        assert history.get(Category.FOOD) is None
        assert history.get_stats()["misses"] == 1

    def test_all_is_newest_first(self, history, clock):
        history.add(Category.TECHNOLOGY, _page(Category.TECHNOLOGY))
        clock.advance(1)
        history.add(Category.SPORTS, _page(Category.SPORTS))
        clock.advance(1)
        history.add(Category.TECHNOLOGY, _page(Category.TECHNOLOGY))

        keys = [entry.key for entry in history.all()]
        assert keys == ["technology", "sports"]

    def test_entry_records_insertion_time(self, history, clock):
        entry = history.add(Category.GAMING, _page(Category.GAMING))
        assert entry.inserted_at == clock.now

    def test_capacity_evicts_oldest_entry(self, clock):
        cache = HistoryCache(max_entries=2, clock=clock)

        cache.add(Category.TECHNOLOGY, _page(Category.TECHNOLOGY))
        cache.add(Category.SPORTS, _page(Category.SPORTS))
        cache.add(Category.TRAVEL, _page(Category.TRAVEL))

        assert cache.get(Category.TECHNOLOGY) is None
        assert [entry.key for entry in cache.all()] == ["travel", "sports"]
        assert cache.get_stats()["evictions"] == 1

    def test_rewriting_a_key_refreshes_its_capacity_position(self, clock):
        cache = HistoryCache(max_entries=2, clock=clock)

        cache.add(Category.TECHNOLOGY, _page(Category.TECHNOLOGY))
        cache.add(Category.SPORTS, _page(Category.SPORTS))
        cache.add(Category.TECHNOLOGY, _page(Category.TECHNOLOGY))
        cache.add(Category.TRAVEL, _page(Category.TRAVEL))

        assert cache.get(Category.SPORTS) is None
        assert cache.get(Category.TECHNOLOGY) is not None

    def test_max_age_expires_entries(self, clock):
        cache = HistoryCache(max_age=timedelta(minutes=10), clock=clock)
        cache.add(Category.SCIENCE, _page(Category.SCIENCE))
        clock.advance(5 * 60)
        cache.add(Category.BUSINESS, _page(Category.BUSINESS))

        clock.advance(6 * 60)

        assert cache.get(Category.SCIENCE) is None
        assert cache.get(Category.BUSINESS) is not None
        assert [entry.key for entry in cache.all()] == ["business"]

    def test_invalid_bounds_rejected(self):
        with pytest.raises(ValueError):
            HistoryCache(max_entries=0)
        with pytest.raises(ValueError):
            HistoryCache(max_age=timedelta(0))

    def test_from_settings_applies_bounds(self, test_settings):
        cache = HistoryCache.from_settings(test_settings)

        assert cache.max_entries == test_settings.news_history_max_entries
        assert cache.max_age == timedelta(seconds=test_settings.news_history_max_age_seconds)
