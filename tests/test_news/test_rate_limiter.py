from datetime import timedelta


class TestRefreshRateLimiter:

    def test_allows_when_never_refreshed(self, rate_limiter):
        assert rate_limiter.try_consume(None)

    def test_denies_within_cooldown(self, rate_limiter, clock):
        last_success = clock.now
        clock.advance(29.9)

        assert not rate_limiter.try_consume(last_success)

    def test_allows_at_exact_cooldown(self, rate_limiter, clock):
        last_success = clock.now
        clock.advance(30)

        assert rate_limiter.try_consume(last_success)

    def test_denial_has_no_side_effect(self, rate_limiter, clock):
        last_success = clock.now
        clock.advance(10)
        assert not rate_limiter.try_consume(last_success)
        assert not rate_limiter.try_consume(last_success)

        clock.advance(20)
        assert rate_limiter.try_consume(last_success)

    def test_remaining(self, rate_limiter, clock):
        last_success = clock.now
        clock.advance(12)

        assert rate_limiter.remaining(last_success) == timedelta(seconds=18)
        assert rate_limiter.remaining(None) == timedelta(0)
