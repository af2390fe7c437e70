from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import Optional, List, Union
from dashboard_api.core.constants import DEFAULT_N8N_BASE_URL


class Settings(BaseSettings):
    # Database
    database_url: str

    # Supabase
    supabase_url: str
    supabase_anon_key: str
    supabase_service_role_key: Optional[str] = None

    # n8n
    n8n_default_base_url: str = DEFAULT_N8N_BASE_URL
    n8n_request_timeout: float = 30.0

    # API
    functions_prefix: str = "/functions/v1"

    # Environment
    environment: str = "development"
    debug: bool = True

    # Encryption (Fernet key; stored API keys stay plaintext when unset)
    encryption_key: Optional[str] = None

    # CORS
    cors_origins: List[str] = ["*"]

    @field_validator('cors_origins', mode='before')
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS origins from environment variable (comma-separated) or use default list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @field_validator('supabase_url', 'n8n_default_base_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from environment


settings = Settings()
