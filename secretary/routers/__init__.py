"""
Routers module - API endpoint handlers organized by feature.

- digest: signup, settings links, unsubscribe and the scheduled run
- sync: push Canvas assignments into the caller's Google Calendar
"""
