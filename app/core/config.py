from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

DEFAULT_QUIZ_SUBJECTS = [
    "Mathematics",
    "Science",
    "English",
    "History",
    "Geography",
    "Computer Science",
]

DEFAULT_QUESTION_BANK_SUBJECTS = [
    "Linux",
    "DevOps",
    "Docker",
    "WordPress",
    "Laravel",
    "Bash",
    "SQL",
    "CMS",
    "Code",
    "Random",
]


class Settings(BaseSettings):
    # Application Information
    app_name: str = Field(default="EduQuest Platform")
    app_description: str = Field(default="Quizzes, leaderboards and study plans")
    app_version: str = Field(default="1.0.0")
    app_url: str = Field(default="http://localhost:8000")
    frontend_url: str = Field(default="http://localhost:5173")
    debug: bool = Field(default=True)
    production: bool = Field(default=False)
    timezone: str = Field(default="UTC")

    # Database Configuration
    database_url: Optional[str] = Field(default=None)
    db_host: str = Field(default="127.0.0.1")
    db_port: int = Field(default=5432)
    db_database: str = Field(default="eduquest")
    db_username: str = Field(default="home")
    db_password: str = Field(default="123")

    # Security Settings
    cors_allowed_origins: List[str] = Field(default=["http://localhost:5173"])

    # JWT Configuration
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    jwt_user_expiration: int = Field(default=7)
    jwt_issuer: str = Field(default="EduQuest Platform")

    # Authorization
    authorization_roles: List[str] = Field(default=["admin", "teacher", "student"])
    authorization_default_role: str = Field(default="student")

    # Redis
    redis_url: str = Field(default="redis://localhost:6379")

    # Rate limiting
    rate_limit_enabled: bool = Field(default=True)
    rate_limit_storage_uri: Optional[str] = Field(default=None)
    redis_rate_limit: str = Field(default="100/minute")
    submission_rate_limit: str = Field(default="20/minute")

    # Pagination
    default_page_size: int = Field(default=10)
    max_page_size: int = Field(default=100)

    # Leaderboards
    leaderboard_default_limit: int = Field(default=10)
    leaderboard_max_limit: int = Field(default=100)

    # Quizzes
    quiz_subjects: List[str] = Field(default=DEFAULT_QUIZ_SUBJECTS)
    quiz_max_questions: int = Field(default=50)

    # External question bank (quizapi.io)
    question_bank_url: str = Field(default="https://quizapi.io/api/v1/questions")
    question_bank_api_key: str = Field(default="")
    question_bank_difficulty: str = Field(default="Easy")
    question_bank_timeout: int = Field(default=10)
    question_bank_cache_ttl: int = Field(default=300)
    question_bank_max_limit: int = Field(default=20)
    question_bank_subjects: List[str] = Field(default=DEFAULT_QUESTION_BANK_SUBJECTS)

    # Result retention (0 keeps results forever)
    scheduler_enabled: bool = Field(default=False)
    quiz_result_retention_days: int = Field(default=0)

    # Logging
    log_level: str = Field(default="info")
    log_file: str = Field(default="logs/app.log")

    # Admin Defaults
    admin_default_name: str = Field(default="Super Admin")
    admin_default_email: str = Field(default="admin@example.com")

    # ============================
    # Generic comma-separated parser
    # ============================
    @staticmethod
    def _parse_csv(value, default):
        if isinstance(value, str):
            items = [x.strip() for x in value.split(",") if x.strip()]
            return items if items else default
        if isinstance(value, list):
            return value
        return default

    @field_validator("authorization_roles", mode="before")
    def validate_roles(cls, v):
        return cls._parse_csv(v, ["admin", "teacher", "student"])

    @field_validator("cors_allowed_origins", mode="before")
    def validate_cors(cls, v):
        return cls._parse_csv(v, ["http://localhost:5173"])

    @field_validator("quiz_subjects", mode="before")
    def validate_quiz_subjects(cls, v):
        return cls._parse_csv(v, DEFAULT_QUIZ_SUBJECTS)

    @field_validator("question_bank_subjects", mode="before")
    def validate_question_bank_subjects(cls, v):
        return cls._parse_csv(v, DEFAULT_QUESTION_BANK_SUBJECTS)

    @property
    def sqlalchemy_database_uri(self) -> str:
        if self.database_url:
            return self.database_url
        return "postgresql+psycopg2://{user}:{password}@{host}:{port}/{database}".format(
            user=self.db_username,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_database,
        )

    @property
    def rate_limit_storage(self) -> str:
        return self.rate_limit_storage_uri or self.redis_url

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


def load_settings():
    try:
        settings = Settings()
        print("✅ Settings loaded successfully!")
        return settings
    except ValidationError as e:
        print("❌ Validation Error:", e)
        raise


settings = load_settings()
