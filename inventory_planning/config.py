import os
import configparser
from pathlib import Path

CONFIG_ENV_VAR = 'INVENTORY_PLANNING_CONFIG'

class Config:
    """Configuration manager for the Inventory Planning System."""

    _instance = None

    def __new__(cls):
        """Singleton pattern implementation."""
        if cls._instance is None:
            cls._instance = super(Config, cls).__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize the configuration if not already initialized."""
        if self._initialized:
            return

        self._config = configparser.ConfigParser(interpolation=None)
        self.load(os.getenv(CONFIG_ENV_VAR, str(Path('config') / 'settings.ini')))
        self._initialized = True

    def load(self, config_path):
        """Load configuration from an INI file on top of the defaults.

        A missing file is not an error; the defaults stay in effect until
        ``save()`` writes them out.
        """
        self._config_path = Path(config_path)
        self._config = configparser.ConfigParser(interpolation=None)
        self._load_defaults()

        if self._config_path.exists():
            self._config.read(self._config_path, encoding='utf-8')

    def _load_defaults(self):
        """Populate default configuration values."""
        self._config['DATABASE'] = {
            'type': 'supabase',
            'engine': 'postgresql',
            'host': 'localhost',
            'port': '5432',
            'database': 'inventory_planning',
            'username': 'postgres',
            'password': 'postgres',
            'pool_size': '5',
            'max_overflow': '10',
            'pool_timeout': '30',
            'pool_recycle': '1800',
            'echo': 'False'
        }

        self._config['SUPABASE'] = {
            'url': '',
            'key': ''
        }

        self._config['LOGGING'] = {
            'level': 'INFO',
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            'directory': 'logs',
            'max_size_mb': '10',
            'backup_count': '5',
            'console_output': 'True',
            'file_output': 'True'
        }

        self._config['PRODUCTION_PLANNING'] = {
            'coverage_days': '30',
            'safety_buffer': '7',
            'holiday_lead_time_days': '14',
            'fallback_daily_usage': '0.1',
            'holiday_factor': '1.15'
        }

        self._config['RAW_MATERIALS'] = {
            'default_year': '2025',
            'recency_months': '3'
        }

    def save(self):
        """Save configuration to file."""
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, 'w', encoding='utf-8') as configfile:
            self._config.write(configfile)

    @property
    def path(self):
        """Path of the active configuration file."""
        return self._config_path

    def get(self, section, key, default=None):
        """Get configuration value."""
        try:
            return self._config.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return default

    def get_int(self, section, key, default=None):
        """Get configuration value as integer."""
        try:
            return self._config.getint(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_float(self, section, key, default=None):
        """Get configuration value as float."""
        try:
            return self._config.getfloat(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def get_boolean(self, section, key, default=None):
        """Get configuration value as boolean."""
        try:
            return self._config.getboolean(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError, ValueError):
            return default

    def set(self, section, key, value):
        """Set configuration value (in memory; call ``save()`` to persist)."""
        if not self._config.has_section(section):
            self._config.add_section(section)

        self._config.set(section, key, str(value))

    def get_db_url(self):
        """Generate SQLAlchemy database URL."""
        engine = self.get('DATABASE', 'engine', 'postgresql')
        username = self.get('DATABASE', 'username', 'postgres')
        password = self.get('DATABASE', 'password', 'postgres')
        host = self.get('DATABASE', 'host', 'localhost')
        port = self.get('DATABASE', 'port', '5432')
        database = self.get('DATABASE', 'database', 'inventory_planning')

        return f"{engine}://{username}:{password}@{host}:{port}/{database}"

    @property
    def log_config(self):
        """Get logging configuration."""
        return {
            'level': self.get('LOGGING', 'level', 'INFO'),
            'format': self.get('LOGGING', 'format', '%(asctime)s - %(name)s - %(levelname)s - %(message)s'),
            'directory': self.get('LOGGING', 'directory', 'logs'),
            'max_size_mb': self.get_int('LOGGING', 'max_size_mb', 10),
            'backup_count': self.get_int('LOGGING', 'backup_count', 5),
            'console_output': self.get_boolean('LOGGING', 'console_output', True),
            'file_output': self.get_boolean('LOGGING', 'file_output', True)
        }

    @property
    def planning_defaults(self):
        """Get production planning defaults."""
        return {
            'coverage_days': self.get_int('PRODUCTION_PLANNING', 'coverage_days', 30),
            'safety_buffer': self.get_int('PRODUCTION_PLANNING', 'safety_buffer', 7),
            'holiday_lead_time_days': self.get_int('PRODUCTION_PLANNING', 'holiday_lead_time_days', 14),
            'fallback_daily_usage': self.get_float('PRODUCTION_PLANNING', 'fallback_daily_usage', 0.1),
            'holiday_factor': self.get_float('PRODUCTION_PLANNING', 'holiday_factor', 1.15)
        }

    @property
    def raw_material_defaults(self):
        """Get raw material analysis defaults."""
        return {
            'default_year': self.get_int('RAW_MATERIALS', 'default_year', 2025),
            'recency_months': self.get_int('RAW_MATERIALS', 'recency_months', 3)
        }

# Global config instance
config = Config()
