"""
Network connectivity monitor package.

Samples wireless link state and internet reachability on a fixed interval,
keeps a bounded in-memory window backed by a durable SQLite log, and derives
uptime, outage-streak, and averaged signal/ping statistics on demand.

CHANGELOG:
- 2026-10-17: Initial creation (STORY-001)

TODO:
- None
"""
