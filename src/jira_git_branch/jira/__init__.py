"""Jira board access and the local issue cache.

- a small REST client for the agile board/sprint endpoints
- a JSON file cache keyed by board id
- a service tying both together with a stale-cache fallback
"""
