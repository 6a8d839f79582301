from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    app_name: str = 'Library-Catalog'
    admin_email: str = 'admin@library.com'
    admin_password: str = 'Admin123'
    admin_name: str = 'Admin User'

    database_url: str = 'sqlite+aiosqlite:///./library.db'
    db_echo: bool = False
    log_level: str = 'INFO'

    hash_algorithm: str = 'pbkdf2_sha256'
    jwt_algorithm: str = 'HS256'
    secret_key: str = 'change-me'
    access_token_expire_minutes: int = 15

    loan_period_days: int = 14
    max_commit_attempts: int = 2

    test_mode: bool = False

    model_config = SettingsConfigDict(env_file='.env', extra='ignore')
