from contextlib import contextmanager

import psycopg
from psycopg.rows import dict_row

from .settings import DATABASE_URL


@contextmanager
def get_conn(database_url: str = DATABASE_URL):
    conn = psycopg.connect(database_url, row_factory=dict_row, application_name="paymee-gateway")
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
