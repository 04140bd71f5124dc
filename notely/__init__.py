"""A JSON web service for users and their notes, stored in SQLite and authenticated by API key."""

__version__ = "0.1.0"