"""PostgreSQL persistence: connection pool, schema and repositories."""
