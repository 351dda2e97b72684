"""Wedding Memories: event-scoped media sharing with live moderation."""
__version__ = "0.1.0"
