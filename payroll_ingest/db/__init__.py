"""PostgreSQL persistence (psycopg2)."""
