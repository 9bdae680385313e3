"""Configuration management."""
import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # API
    GOOGLE_BOOKS_API_KEY = os.getenv("GOOGLE_BOOKS_API_KEY")
    DEFAULT_TIMEOUT = int(os.getenv("DEFAULT_TIMEOUT", "10"))

    # Collections
    RECENTLY_VIEWED_LIMIT = int(os.getenv("RECENTLY_VIEWED_LIMIT", "20"))

    # Favorites store: "file", "memory" or "postgres"
    STORE_BACKEND = os.getenv("STORE_BACKEND", "file")
    STORE_PATH = os.getenv(
        "STORE_PATH",
        os.path.join(os.path.expanduser("~"), ".book-finder", "store.json")
    )
    STORE_SCOPE = os.getenv("STORE_SCOPE", "book-finder")

    # Database (postgres backend only)
    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = os.getenv("DB_PORT", "5432")
    DB_NAME = os.getenv("DB_NAME", "booksdb")
    DB_USER = os.getenv("DB_USER", "postgres")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")

    @property
    def DATABASE_URL(self):
        """Build PostgreSQL connection string."""
        return f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
