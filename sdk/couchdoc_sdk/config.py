"""
Configuration for the couchdoc SDK.

Uses pydantic-settings for environment variable loading.
"""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Client configuration loaded from environment."""

    # CouchDB server
    couchdb_url: str = Field(
        default="http://localhost:5984/",
        description="Base URL of the CouchDB server",
    )

    # Transport
    timeout: float = Field(default=30.0, description="HTTP timeout seconds")

    model_config = {"env_prefix": "COUCHDOC_"}
