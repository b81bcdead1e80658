"""Services for migrations, catalog writes and reads, and job logging."""
