"""
PostgreSQL queries for asserting on rows written by the system under test.
"""
from typing import Any, Dict, List, Optional, Sequence

import psycopg2
import psycopg2.extras

from lambda_harness.harness_config import DatabaseConfig
from lambda_harness.logging_utils import log_safe


class PostgresTestHelper:
    """Opens a connection per query and closes it afterwards."""

    def __init__(self, config: DatabaseConfig):
        self.config = config

    def connect(self):
        return psycopg2.connect(
            host=self.config.host,
            port=self.config.port,
            user=self.config.user,
            password=self.config.password,
            dbname=self.config.database,
            **self.config.options
        )

    def query(self, query_string: str, params: Optional[Sequence[Any]] = None) -> List[Dict[str, Any]]:
        """
        Run one statement and return its rows.

        Args:
            query_string: SQL with %s placeholders
            params: Values for the placeholders

        Returns:
            Rows as dicts keyed by column name; [] for statements without a result set
        """
        log_safe("Postgres query", {'host': self.config.host, 'database': self.config.database, 'sql': query_string})
        connection = self.connect()
        try:
            with connection:
                with connection.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cursor:
                    cursor.execute(query_string, params)
                    if cursor.description is None:
                        return []
                    return [dict(row) for row in cursor.fetchall()]
        finally:
            connection.close()
