import logging
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from searchbuilder.constants import DEFAULT_DB_PATH, SCORE_CTE_NAME, SCORE_UNION_ALIAS


class Config(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SEARCHBUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_assignment=True,
    )

    db_path: Path = Path(DEFAULT_DB_PATH)
    log_level: str = "INFO"

    # Names used inside the composed statement
    cte_name: str = SCORE_CTE_NAME
    union_alias: str = SCORE_UNION_ALIAS

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("cte_name", "union_alias")
    @classmethod
    def _validate_identifier(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Not a valid SQL identifier: {v!r}")
        return v
