# inventory_planning/db/__init__.py
from .connection import DatabaseConnection, db
from .interface import DatabaseAdapter, DatabaseInterface, SupabaseInterface, SQLAlchemyInterface

from inventory_planning.exceptions import DatabaseError

# Get the global database adapter
database_adapter = DatabaseAdapter(db)

def initialize():
    """Initialize database connection and create tables if needed."""
    try:
        db.initialize()
        if db.db_type == "postgresql":
            from inventory_planning.models import Base
            Base.metadata.create_all(bind=db.engine)
        else:
            # Supabase tables are created through SQL migrations; a cheap
            # query confirms the credentials and the schema.
            database_adapter.query_rows('production_plan_runs', limit=1)
    except DatabaseError:
        raise
    except Exception as e:
        raise DatabaseError(f"Database initialization failed: {str(e)}")

def get_db_type() -> str:
    """Get current database type."""
    return db.db_type

def create_all_tables():
    """Create all tables (PostgreSQL only)."""
    if db.db_type != "postgresql":
        raise DatabaseError("create_all_tables is only available for PostgreSQL")

    from inventory_planning.models import Base
    Base.metadata.create_all(bind=db.engine)

def drop_all_tables():
    """Drop all tables (PostgreSQL only)."""
    if db.db_type != "postgresql":
        raise DatabaseError("drop_all_tables is only available for PostgreSQL")

    from inventory_planning.models import Base
    Base.metadata.drop_all(bind=db.engine)

__all__ = [
    'db',
    'initialize',
    'get_db_type',
    'database_adapter',
    'create_all_tables',
    'drop_all_tables',
    'DatabaseAdapter',
    'DatabaseConnection',
    'DatabaseInterface',
    'SupabaseInterface',
    'SQLAlchemyInterface'
]
