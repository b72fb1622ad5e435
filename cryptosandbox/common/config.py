"""
Runtime settings for the crypto sandbox.

Values come from environment variables, optionally loaded from a .env file.
"""

import os
from typing import Literal, Optional, get_args

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LOG_LEVELS = get_args(LogLevel)


class Settings(BaseModel):
    """Tunable parameters of the sandbox."""
    transcript_path: str = Field("sandbox_log.txt", description="Transcript file written by the demo")
    chunk_size: int = Field(8, ge=1, description="Plaintext characters per cipher block")
    rabin_miller_rounds: int = Field(20, ge=1, description="Witness rounds per primality test")
    max_attempts: int = Field(100_000, ge=1, description="Retry cap for prime and exponent search")
    max_sessions: Optional[int] = Field(None, ge=1, description="Private keys kept per user, None keeps all")
    log_level: LogLevel = Field("INFO", description="Logging level name")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value


def load_settings() -> Settings:
    """
    Build Settings from SANDBOX_* environment variables.
    
    Returns:
        Settings object
    
    Raises:
        pydantic.ValidationError: If a variable holds an invalid value
    """
    values = {
        'transcript_path': os.getenv('SANDBOX_TRANSCRIPT_PATH'),
        'chunk_size': os.getenv('SANDBOX_CHUNK_SIZE'),
        'rabin_miller_rounds': os.getenv('SANDBOX_RM_ROUNDS'),
        'max_attempts': os.getenv('SANDBOX_MAX_ATTEMPTS'),
        'max_sessions': os.getenv('SANDBOX_MAX_SESSIONS'),
        'log_level': os.getenv('SANDBOX_LOG_LEVEL'),
    }
    return Settings(**{key: value for key, value in values.items() if value})
