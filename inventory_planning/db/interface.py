# inventory_planning/db/interface.py
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Any, Optional, List

from sqlalchemy import select, insert, update, delete
from sqlalchemy.exc import SQLAlchemyError

from inventory_planning.models import Base
from inventory_planning.exceptions import DatabaseError

class DatabaseInterface(ABC):
    """Abstract table-level database interface for different database types."""

    @abstractmethod
    def query(
        self,
        table_name: str,
        filters: Dict[str, Any] = None,
        limit: int = None,
        order_by: str = None,
        descending: bool = False
    ) -> List[Dict[str, Any]]:
        """Query rows from a table."""
        pass

    @abstractmethod
    def insert(self, table_name: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Insert one row and return it as stored."""
        pass

    @abstractmethod
    def insert_many(self, table_name: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert several rows in one statement."""
        pass

    @abstractmethod
    def update(self, table_name: str, data: Dict[str, Any], filters: Dict[str, Any]) -> int:
        """Update rows in a table."""
        pass

    @abstractmethod
    def delete(self, table_name: str, filters: Dict[str, Any]) -> int:
        """Delete rows from a table."""
        pass

class SupabaseInterface(DatabaseInterface):
    """Supabase interface implementation."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    @staticmethod
    def _apply_filters(query, filters: Optional[Dict[str, Any]]):
        for key, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                query = query.in_(key, list(value))
            else:
                query = query.eq(key, value)
        return query

    @staticmethod
    def _execute(query, action: str, table_name: str):
        try:
            result = query.execute()
        except Exception as e:
            raise DatabaseError(f"Supabase {action} error on '{table_name}': {str(e)}") from e

        if hasattr(result, 'error') and result.error:
            raise DatabaseError(f"Supabase {action} error on '{table_name}': {result.error}")

        return result

    def query(self, table_name, filters=None, limit=None, order_by=None, descending=False):
        """Query data from a table using Supabase."""
        query = self._apply_filters(self.client.table(table_name).select('*'), filters)

        if order_by:
            query = query.order(order_by, desc=descending)

        if limit:
            query = query.limit(limit)

        result = self._execute(query, 'query', table_name)
        return result.data if result.data else []

    def insert(self, table_name, data):
        """Insert data into a table using Supabase."""
        result = self._execute(self.client.table(table_name).insert(data), 'insert', table_name)
        return result.data[0] if result.data else {}

    def insert_many(self, table_name, rows):
        if not rows:
            return []
        result = self._execute(self.client.table(table_name).insert(rows), 'insert', table_name)
        return result.data if result.data else []

    def update(self, table_name, data, filters):
        """Update data in a table using Supabase."""
        query = self._apply_filters(self.client.table(table_name).update(data), filters)
        result = self._execute(query, 'update', table_name)
        return len(result.data) if result.data else 0

    def delete(self, table_name, filters):
        """Delete data from a table using Supabase."""
        query = self._apply_filters(self.client.table(table_name).delete(), filters)
        result = self._execute(query, 'delete', table_name)
        return len(result.data) if result.data else 0

class SQLAlchemyInterface(DatabaseInterface):
    """PostgreSQL interface working on the ORM table metadata.

    When bound to an open session every statement joins that session's
    transaction; otherwise each call runs in its own session scope.
    """

    def __init__(self, connection, session=None):
        self.connection = connection
        self.session = session

    @contextmanager
    def _scope(self, action: str, table_name: str):
        try:
            if self.session is not None:
                yield self.session
            else:
                with self.connection.session_scope() as session:
                    yield session
        except SQLAlchemyError as e:
            raise DatabaseError(f"PostgreSQL {action} error on '{table_name}': {str(e)}") from e

    @staticmethod
    def _table(table_name: str):
        try:
            return Base.metadata.tables[table_name]
        except KeyError:
            raise DatabaseError(f"Unknown table: {table_name}")

    @staticmethod
    def _where(statement, table, filters):
        for key, value in (filters or {}).items():
            if isinstance(value, (list, tuple, set)):
                statement = statement.where(table.c[key].in_(list(value)))
            else:
                statement = statement.where(table.c[key] == value)
        return statement

    def query(self, table_name, filters=None, limit=None, order_by=None, descending=False):
        table = self._table(table_name)
        statement = self._where(select(table), table, filters)

        if order_by:
            column = table.c[order_by]
            statement = statement.order_by(column.desc() if descending else column.asc())

        if limit:
            statement = statement.limit(limit)

        with self._scope('query', table_name) as session:
            return [dict(row) for row in session.execute(statement).mappings().all()]

    def insert(self, table_name, data):
        table = self._table(table_name)
        with self._scope('insert', table_name) as session:
            row = session.execute(insert(table).values(**data).returning(table)).mappings().one()
            return dict(row)

    def insert_many(self, table_name, rows):
        if not rows:
            return []
        table = self._table(table_name)
        with self._scope('insert', table_name) as session:
            result = session.execute(insert(table).returning(table), rows)
            return [dict(row) for row in result.mappings().all()]

    def update(self, table_name, data, filters):
        table = self._table(table_name)
        with self._scope('update', table_name) as session:
            return session.execute(self._where(update(table).values(**data), table, filters)).rowcount

    def delete(self, table_name, filters):
        table = self._table(table_name)
        with self._scope('delete', table_name) as session:
            return session.execute(self._where(delete(table), table, filters)).rowcount

class DatabaseAdapter:
    """Adapter that provides unified access to different database backends."""

    def __init__(self, connection):
        """Initialize with database connection."""
        self.connection = connection
        self._interface = None

    @property
    def interface(self) -> DatabaseInterface:
        """Get appropriate database interface."""
        if self._interface is None:
            if self.connection.db_type == "supabase":
                self._interface = SupabaseInterface(self.connection.get_supabase())
            elif self.connection.db_type == "postgresql":
                self._interface = SQLAlchemyInterface(self.connection)
            else:
                raise DatabaseError(f"Unknown database type: {self.connection.db_type}")

        return self._interface

    @property
    def supports_transactions(self) -> bool:
        return self.connection.db_type == "postgresql"

    @contextmanager
    def transaction(self):
        """Yield an interface whose writes commit or roll back together.

        Supabase has no client-side transactions; callers must compensate
        themselves when ``supports_transactions`` is False.
        """
        if self.supports_transactions:
            with self.connection.session_scope() as session:
                yield SQLAlchemyInterface(self.connection, session=session)
        else:
            yield self.interface

    def query_rows(self, table_name, filters=None, limit=None, order_by=None, descending=False):
        return self.interface.query(table_name, filters, limit, order_by, descending)

    def update_rows(self, table_name, data, filters):
        return self.interface.update(table_name, data, filters)

    def delete_rows(self, table_name, filters):
        return self.interface.delete(table_name, filters)
