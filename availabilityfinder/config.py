"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Sequence

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.scheduling_engine import EngineSettings
from .domain.scoring import ScoringWeights


class DefaultsConfig(BaseModel):
    """Default settings for search."""
    duration_minutes: int = 30
    start_hour: int = 9
    end_hour: int = 17
    days_of_week: List[int] = Field(default_factory=lambda: [1, 2, 3, 4, 5])
    consecutive_days: int = 1

    @field_validator("duration_minutes", "consecutive_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure duration and day counts are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    @field_validator("start_hour", "end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("days_of_week")
    @classmethod
    def validate_days_of_week(cls, value: List[int]) -> List[int]:
        """Ensure weekday codes are ISO (1=Monday .. 7=Sunday) and deduplicated."""
        if not value:
            raise ValueError("days_of_week must not be empty")
        invalid_days = [day for day in value if day not in range(1, 8)]
        if invalid_days:
            raise ValueError(f"days_of_week must be between 1 and 7, got {invalid_days}")
        return sorted(set(value))

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.end_hour <= self.start_hour:
            raise ValueError("end_hour must be later than start_hour")
        return self

    def get_start_time(self) -> time:
        """Get start time as time object."""
        return time(hour=self.start_hour, minute=0)

    def get_end_time(self) -> time:
        """Get end time as time object."""
        return time(hour=self.end_hour, minute=0)


class ScoringConfig(BaseModel):
    """Coefficients of the confidence score."""
    base: float = 50.0
    buffer_points: float = 25.0
    buffer_cap_minutes: int = Field(default=30, ge=0)
    window_points: float = 15.0
    fit_points: float = 10.0

    def to_weights(self) -> ScoringWeights:
        return ScoringWeights(**self.model_dump())


class EngineConfig(BaseModel):
    """Limits applied to every search."""
    max_range_days: int = Field(default=366, gt=0)
    max_workers: int = Field(default=0, ge=0)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)

    def to_settings(self) -> EngineSettings:
        return EngineSettings(
            max_range_days=self.max_range_days,
            max_workers=self.max_workers,
            scoring=self.scoring.to_weights(),
        )


class GraphConfig(BaseModel):
    """Microsoft Graph calendar provider settings."""
    endpoint: str = "https://graph.microsoft.com/v1.0"
    access_token: str = ""
    timeout_seconds: int = 30


class Participant(BaseModel):
    """Participant configuration."""
    name: str  # Used as alias
    email: str
    calendar_id: str = ""  # Optional: for mock data mapping


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/Berlin"
    log_level: str = "WARNING"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    participants: List[Participant] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("participants")
    @classmethod
    def validate_participants(cls, value: List[Participant]) -> List[Participant]:
        """Ensure participant aliases and emails are unique."""
        seen_names: set[str] = set()
        seen_emails: set[str] = set()
        for participant in value:
            name_key = participant.name.lower()
            email_key = participant.email.lower()
            if name_key in seen_names:
                raise ValueError(f"Duplicate participant name detected: {participant.name}")
            if email_key in seen_emails:
                raise ValueError(f"Duplicate participant email detected: {participant.email}")
            seen_names.add(name_key)
            seen_emails.add(email_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "AppConfig":
        """
        Load an explicit config file, or the default one if it exists.

        Without any config file the built-in defaults are used.
        """
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)

        return cls()

    def find_participant_by_name(self, name: str) -> Participant | None:
        """Find a participant by their name (alias)."""
        for participant in self.participants:
            if participant.name.lower() == name.lower():
                return participant
        return None

    def find_participant_by_email(self, email: str) -> Participant | None:
        """Find a participant by their email."""
        for participant in self.participants:
            if participant.email.lower() == email.lower():
                return participant
        return None

    def resolve_participant(self, identifier: str) -> str:
        """
        Resolve a participant identifier (name/alias or email) to an email address.

        Raises:
            ValueError: If identifier cannot be resolved
        """
        if "@" in identifier:
            return identifier.lower()

        participant = self.find_participant_by_name(identifier)
        if participant:
            return participant.email.lower()

        raise ValueError(
            f"Unknown participant identifier: '{identifier}'. "
            f"Use an email address or a configured name."
        )

    def resolve_participants(self, identifiers: Sequence[str]) -> List[str]:
        """
        Resolve multiple participant identifiers, ensuring uniqueness.

        Args:
            identifiers: Iterable of participant aliases or email addresses.

        Returns:
            List of unique participant email addresses.
        """
        if not identifiers:
            raise ValueError("No participants provided.")

        resolved_emails: List[str] = []
        unknown_identifiers: List[str] = []

        for identifier in identifiers:
            try:
                email = self.resolve_participant(identifier)
            except ValueError:
                unknown_identifiers.append(identifier)
                continue

            if email not in resolved_emails:
                resolved_emails.append(email)

        if unknown_identifiers:
            missing = ", ".join(sorted(set(unknown_identifiers)))
            raise ValueError(
                f"Unknown participant identifier(s): {missing}. "
                "Ensure they exist in the configuration or provide valid email addresses."
            )

        return resolved_emails


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
