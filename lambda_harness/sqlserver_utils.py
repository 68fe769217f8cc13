"""
SQL Server queries for asserting on rows written by the system under test.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pymssql

from lambda_harness.harness_config import DatabaseConfig
from lambda_harness.logging_utils import log_safe


class SqlServerTestHelper:
    """Opens a connection per query and closes it afterwards."""

    def __init__(self, config: DatabaseConfig):
        self.config = config

    def connect(self):
        return pymssql.connect(
            server=self.config.host,
            port=str(self.config.port),
            user=self.config.user,
            password=self.config.password,
            database=self.config.database,
            **self.config.options
        )

    def query(self, query_string: str,
              params: Optional[Union[Sequence[Any], Mapping[str, Any]]] = None) -> List[Dict[str, Any]]:
        """
        Run one statement, commit, and return its rows.

        Args:
            query_string: SQL with %s or %(name)s placeholders
            params: Values for the placeholders

        Returns:
            Rows as dicts keyed by column name; [] for statements without a result set
        """
        log_safe("SQL Server query", {'host': self.config.host, 'database': self.config.database, 'sql': query_string})
        connection = self.connect()
        try:
            cursor = connection.cursor(as_dict=True)
            cursor.execute(query_string, params)
            rows = cursor.fetchall() if cursor.description else []
            connection.commit()
            return [dict(row) for row in rows]
        finally:
            connection.close()
