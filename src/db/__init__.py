from .schema import SCHEMA_SQL, INDEXES_SQL, BILLING_COLUMN_NAMES
from .client import get_admin_client
from .users import SupabaseUserStore
from .postgres import get_postgres_connection, get_database_url, check_table_exists, get_missing_columns

__all__ = [
    "SCHEMA_SQL",
    "INDEXES_SQL",
    "BILLING_COLUMN_NAMES",
    "get_admin_client",
    "SupabaseUserStore",
    "get_postgres_connection",
    "get_database_url",
    "check_table_exists",
    "get_missing_columns",
]
