"""
Configuration management for BrandStore.

Loads settings from a YAML config file, lets environment variables (and a
.env file) override them, and provides typed access.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
import yaml

# Load environment variables from .env file
from dotenv import load_dotenv
load_dotenv()


def _project_root() -> Path:
    """Return project root (parent of brandstore package)."""
    return Path(__file__).resolve().parent.parent.parent


DEFAULT_CONFIG_PATH = _project_root() / "config" / "default.yaml"


@dataclass
class StoreConfig:
    """Configuration for the BrandStore back office."""

    # Relational store
    database_url: str = "sqlite:///./brandstore.db"
    database_echo: bool = False

    # Object store (Supabase Storage)
    supabase_url: str = ""
    supabase_key: str = ""
    storage_bucket: str = "brandstore"
    storage_timeout: float = 30.0

    # Auth
    jwt_secret: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    customer_token_days: int = 7
    admin_token_hours: int = 1

    # Payments
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_base_url: str = "https://api.razorpay.com/v1"
    payment_currency: str = "INR"

    # HTTP
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
    log_level: str = "INFO"

    @classmethod
    def from_yaml(cls, config_path: Optional[Path] = None) -> "StoreConfig":
        """Load configuration from YAML file, then apply environment overrides."""
        path = config_path or DEFAULT_CONFIG_PATH
        data = {}
        if path.exists():
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

        database = data.get('database', {})
        storage = data.get('storage', {})
        auth = data.get('auth', {})
        payments = data.get('payments', {})
        server = data.get('server', {})

        config = cls(
            database_url=database.get('url', cls.database_url),
            database_echo=database.get('echo', False),
            supabase_url=storage.get('supabase_url', ''),
            storage_bucket=storage.get('bucket', cls.storage_bucket),
            storage_timeout=float(storage.get('timeout', cls.storage_timeout)),
            jwt_algorithm=auth.get('algorithm', cls.jwt_algorithm),
            customer_token_days=int(auth.get('customer_token_days', cls.customer_token_days)),
            admin_token_hours=int(auth.get('admin_token_hours', cls.admin_token_hours)),
            razorpay_base_url=payments.get('razorpay_base_url', cls.razorpay_base_url),
            payment_currency=payments.get('currency', cls.payment_currency),
            cors_origins=list(server.get('cors_origins', ["http://localhost:5173"])),
            log_level=server.get('log_level', cls.log_level),
        )
        config.apply_env()
        return config

    def apply_env(self) -> None:
        """Override settings from environment variables. Secrets only ever come from here."""
        self.database_url = os.getenv("DATABASE_URL") or self.database_url
        self.supabase_url = os.getenv("SUPABASE_URL") or self.supabase_url
        self.supabase_key = (
            os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_KEY") or self.supabase_key
        )
        self.storage_bucket = os.getenv("STORAGE_BUCKET") or self.storage_bucket
        self.jwt_secret = os.getenv("JWT_SECRET") or self.jwt_secret
        self.razorpay_key_id = os.getenv("RAZORPAY_KEY_ID") or self.razorpay_key_id
        self.razorpay_key_secret = os.getenv("RAZORPAY_KEY_SECRET") or self.razorpay_key_secret
        self.log_level = (os.getenv("LOG_LEVEL") or self.log_level).upper()
        origins = os.getenv("CORS_ORIGINS")
        if origins:
            self.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]


# Global config instance
_config: Optional[StoreConfig] = None


def get_config() -> StoreConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = StoreConfig.from_yaml()
    return _config


def set_config(config: StoreConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
