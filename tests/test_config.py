import pytest
from pydantic import ValidationError

from newsdesk.config import Settings
from newsdesk.news.models import RegionCode


class TestSettings:

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.news_page_size == 12
        assert settings.news_total_pages == 5
        assert settings.news_default_region is RegionCode.US

    def test_default_region_normalized(self):
        settings = Settings(_env_file=None, news_default_region=" GB ")

        assert settings.news_default_region is RegionCode.GB

    def test_unsupported_default_region_rejected_on_load(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, news_default_region="atlantis")

