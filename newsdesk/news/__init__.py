"""
News Module
===========

Live, paginated news feeds for the reader:
- Upstream page fetching per category and region
- Per-session pagination state with stale-result gating
- Rate-limited manual refresh and periodic background refresh
- Process-wide archive of the latest first pages per category
"""
