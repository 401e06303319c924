import os
from typing import List
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings:
    def __init__(self):
        self.database_url: str = os.getenv("DATABASE_URL", "sqlite:///./tournament_points.db")
        self.debug: bool = os.getenv("DEBUG", "False").lower() == "true"
        # Only used for Postgres connections
        self.db_sslmode: str = os.getenv("DB_SSLMODE", "require")
        self.cors_origins: List[str] = [
            "http://localhost:4200",
            "http://127.0.0.1:4200",
            "http://localhost:3000",
            "http://localhost:5173",
        ]

        # Import pipeline
        self.import_max_workers: int = int(os.getenv("IMPORT_MAX_WORKERS", 4))
        self.member_id_prefix: str = os.getenv("MEMBER_ID_PREFIX", "GEN")
        self.member_id_max_attempts: int = int(os.getenv("MEMBER_ID_MAX_ATTEMPTS", 10))

        # Points ledger
        # When true, a reversal that would drive a bucket or total below zero
        # aborts the deletion instead of clamping at zero.
        self.ledger_strict_reversal: bool = os.getenv("LEDGER_STRICT_REVERSAL", "False").lower() == "true"

        # Rankings
        self.ranking_default_limit: int = int(os.getenv("RANKING_DEFAULT_LIMIT", 50))
        self.ranking_max_limit: int = int(os.getenv("RANKING_MAX_LIMIT", 200))

settings = Settings()
