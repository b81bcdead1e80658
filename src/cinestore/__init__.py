"""Schema migrations, catalog upserts and job logging for cinema showtimes."""

__version__ = "0.1.0"
