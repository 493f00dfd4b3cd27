# inventory_planning/db/connection.py
import os
from typing import Dict, Any, Literal
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from supabase import create_client, Client

from inventory_planning.config import config
from inventory_planning.exceptions import DatabaseError

DatabaseType = Literal["postgresql", "supabase"]

class DatabaseConfig:
    """Configuration for database connections."""

    @staticmethod
    def get_db_type() -> DatabaseType:
        """Get database type from configuration."""
        db_type = config.get('DATABASE', 'type', default='supabase').lower()
        # Remove any comments from the value
        db_type = db_type.split('#')[0].strip()
        return db_type

    @staticmethod
    def get_postgresql_config() -> Dict[str, Any]:
        """Get PostgreSQL connection configuration."""
        return {
            'engine': config.get('DATABASE', 'engine', default='postgresql'),
            'host': config.get('DATABASE', 'host', default='localhost'),
            'port': config.get_int('DATABASE', 'port', default=5432),
            'database': config.get('DATABASE', 'database', default='inventory_planning'),
            'username': config.get('DATABASE', 'username', default='postgres'),
            'password': config.get('DATABASE', 'password', default='postgres'),
            'pool_size': config.get_int('DATABASE', 'pool_size', default=5),
            'max_overflow': config.get_int('DATABASE', 'max_overflow', default=10),
            'pool_timeout': config.get_int('DATABASE', 'pool_timeout', default=30),
            'pool_recycle': config.get_int('DATABASE', 'pool_recycle', default=1800),
            'echo': config.get_boolean('DATABASE', 'echo', default=False)
        }

    @staticmethod
    def get_supabase_config() -> Dict[str, str]:
        """Get Supabase connection configuration."""
        # Try environment variables first
        if os.getenv('SUPABASE_URL') and os.getenv('SUPABASE_KEY'):
            return {
                'url': os.getenv('SUPABASE_URL'),
                'key': os.getenv('SUPABASE_KEY')
            }

        # Fall back to config file
        return {
            'url': config.get('SUPABASE', 'url', default=''),
            'key': config.get('SUPABASE', 'key', default='')
        }

    @staticmethod
    def get_connection_string() -> str:
        """Get PostgreSQL connection string."""
        return config.get_db_url()

class DatabaseConnection:
    """Unified database connection handler for PostgreSQL and Supabase.

    The connection is opened lazily on first use so that importing the
    package never touches the network.
    """

    _instance = None

    def __new__(cls):
        """Ensure singleton pattern."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._db_type = None
            cls._instance._engine = None
            cls._instance._SessionLocal = None
            cls._instance._supabase = None
        return cls._instance

    def initialize(self, db_type: DatabaseType = None):
        """Initialize the database connection based on type."""
        db_type = db_type or DatabaseConfig.get_db_type()

        if db_type == "supabase":
            self._initialize_supabase()
        elif db_type == "postgresql":
            self._initialize_postgresql()
        else:
            raise DatabaseError(f"Unknown database type: {db_type}")

        self._db_type = db_type

    def _ensure_initialized(self):
        if self._db_type is None:
            self.initialize()

    def _initialize_postgresql(self):
        """Initialize PostgreSQL connection."""
        try:
            pg_config = DatabaseConfig.get_postgresql_config()
            connection_string = DatabaseConfig.get_connection_string()

            self._engine = create_engine(
                connection_string,
                pool_size=pg_config['pool_size'],
                max_overflow=pg_config['max_overflow'],
                pool_timeout=pg_config['pool_timeout'],
                pool_recycle=pg_config['pool_recycle'],
                echo=pg_config['echo']
            )

            self._SessionLocal = sessionmaker(
                autocommit=False,
                autoflush=False,
                bind=self._engine
            )

            # Test connection
            self._test_postgresql_connection()

        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to initialize PostgreSQL connection: {str(e)}")

    def _initialize_supabase(self):
        """Initialize Supabase connection."""
        supabase_config = DatabaseConfig.get_supabase_config()

        if not supabase_config['url'] or not supabase_config['key']:
            raise DatabaseError("Supabase URL and key must be provided")

        try:
            self._supabase = create_client(
                supabase_config['url'],
                supabase_config['key']
            )
        except Exception as e:
            raise DatabaseError(f"Failed to initialize Supabase connection: {str(e)}")

    def _test_postgresql_connection(self):
        """Test PostgreSQL connection."""
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            raise DatabaseError(f"PostgreSQL connection test failed: {str(e)}")

    @contextmanager
    def session_scope(self) -> Session:
        """Provide transaction scope for database operations."""
        self._ensure_initialized()
        if self._db_type != "postgresql":
            raise DatabaseError("session_scope is only available for PostgreSQL connections")

        session = self._SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def get_supabase(self) -> Client:
        """Get Supabase client (Supabase only)."""
        self._ensure_initialized()
        if self._db_type != "supabase":
            raise DatabaseError("get_supabase is only available for Supabase connections")

        return self._supabase

    @property
    def engine(self):
        """Get SQLAlchemy engine (PostgreSQL only)."""
        self._ensure_initialized()
        if self._db_type != "postgresql":
            raise DatabaseError("engine is only available for PostgreSQL connections")

        return self._engine

    @property
    def db_type(self) -> DatabaseType:
        """Get current database type."""
        self._ensure_initialized()
        return self._db_type

# Singleton instance
db = DatabaseConnection()
