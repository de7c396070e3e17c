import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Application configuration settings"""

    # Database settings
    DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///classroom.db')

    # Runtime settings
    DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

    # Logging settings
    LOG_DIR = os.getenv('LOG_DIR', 'logs')
    LOG_TO_FILE = os.getenv('LOG_TO_FILE', 'True').lower() == 'true'

    @classmethod
    def get_async_database_url(cls, database_url: str = None) -> str:
        """Return the database URL with the async sqlite driver applied"""
        url = database_url or cls.DATABASE_URL
        if url.startswith('sqlite:///'):
            url = url.replace('sqlite:///', 'sqlite+aiosqlite:///')
        return url

    @classmethod
    def validate(cls):
        """Validate that required configuration is present"""
        if not cls.DATABASE_URL:
            raise ValueError("DATABASE_URL is required")
        if not cls.LOG_DIR and cls.LOG_TO_FILE:
            raise ValueError("LOG_DIR is required when LOG_TO_FILE is enabled")
