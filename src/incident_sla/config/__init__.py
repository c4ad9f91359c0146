"""
Configuration Module
====================

Application settings and configuration management using Pydantic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache
from pathlib import Path
from typing import List
from enum import Enum


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="incident-sla", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== SLA Configuration ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to SLA threshold configuration YAML file"
    )
    watch_sla_config: bool = Field(
        default=True,
        description="Reload the SLA threshold file when it changes on disk"
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in allowed:
            raise ValueError(f"log_level must be one of {allowed}")
        return v.upper()


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Constants ==========

class SLAVerdict(str, Enum):
    """Outcome of an interval (or a whole incident) against its SLA threshold."""
    PASS = "Y"
    FAIL = "N"
    UNDETERMINED = ""


class ComplianceFlag(str, Enum):
    """Compliance marker carried by the flagged priority buckets."""
    NON_COMPLIANT = "non-compliant"
    COMPLIANT = "compliant"
    NOT_EVALUATED = ""


class ColumnRole(str):
    """Default input column names, used when no header resembles the role."""
    NUMBER = "Number"
    PRIORITY = "Priority"
    STATE = "State"
    OPENED = "Opened"
    UPDATED = "Updated"


class SheetName(str):
    """Names of the sheets in the generated workbook."""
    INCIDENT_INTERVALS = "Incident Intervals"
    COMPLIANCE = "Compliance and Credit"


# ========== Output headers ==========

DETAIL_BASE_HEADERS = ["Number", "Priority", "State", "Opened Date"]
INCIDENT_SLA_HEADER = "Made SLA"

COMPLIANCE_HEADERS = [
    "Priority/SLA",
    "Total Incident",
    "Within SLA",
    "% for Within SLA",
    "Exceeding SLA",
    "Compliance and Credit",
]
COMPLIANCE_TITLE = "Compliance and Credit"
TOTAL_ROW_LABEL = "Total"


# ========== Defaults for validation ==========

DEFAULT_SLA_TARGET_MINUTES = {
    "P1": 60,
    "P2": 180,
    "P3": 240,
    "P4": 480,
}
DEFAULT_THRESHOLD_MINUTES = 480
DEFAULT_PRIORITY_BUCKETS = ["P1 - Critical", "P2 - High", "P3 - Medium", "P4 - Low"]
DEFAULT_FLAGGED_PRIORITIES = ["P1", "P2"]
DEFAULT_COMPLIANCE_TARGET_PERCENT = 95.0

COLUMN_ROLES = [
    ColumnRole.NUMBER, ColumnRole.PRIORITY, ColumnRole.STATE,
    ColumnRole.OPENED, ColumnRole.UPDATED
]
