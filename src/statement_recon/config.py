"""Configuration loader and validation for reconciliation and scoring settings."""

from pathlib import Path
from typing import Any, Optional
import logging

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .utils.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class InputConfig(BaseModel):
    """Configuration for transaction CSV parsing."""

    csv: dict[str, Any] = Field(
        default_factory=lambda: {
            "encoding": "utf-8",
            "delimiter": ",",
            "date_format": "%Y-%m-%d",
            "column_mappings": {
                "id": "id",
                "date": "date",
                "merchant": "merchant",
                "amount": "amount",
                "category": "category",
                "description": "description",
                "is_pending": "is_pending",
            },
        }
    )


class MatchingConfig(BaseModel):
    """Thresholds for merchant matching, deduplication and reconciliation."""

    amount_tolerance: float = 0.01
    date_window_days: int = 5
    tie_break: str = "first"
    min_core_length: int = 3
    min_containment_length: int = 4
    min_prefix_length: int = 5
    prefix_ratio: float = 0.7
    max_duplicate_examples: int = 5

    @field_validator("tie_break")
    @classmethod
    def _check_tie_break(cls, value: str) -> str:
        if value not in ("first", "closest_date"):
            raise ValueError("tie_break must be 'first' or 'closest_date'")
        return value


class SummaryConfig(BaseModel):
    """Eligibility and grouping rules for merchant summaries."""

    min_transactions: int = 3
    min_months: int = 3
    day_window: int = 3
    rent_pattern: str = (
        r"\b(rent|lease|rental|landlord|property\s*management|realty|housing)\b"
    )
    rent_exclusion_pattern: str = (
        r"\b(wells\s*fargo|bank\s*of\s*america|chase|citi|apartment|complex)\b"
    )
    rent_key: str = "rent payment"


class IntervalMultiplierBand(BaseModel):
    """Multiplier applied when the median interval falls inside a band."""

    name: str
    min_days: int
    max_days: int
    multiplier: float


class ScoringWeights(BaseModel):
    """Weights of the four rule-score components."""

    interval_regularity: float = 0.35
    day_concentration: float = 0.25
    amount_stability: float = 0.25
    keyword_bonus: float = 0.15


class ScoringConfig(BaseModel):
    """Configuration for the fixed-expense rule scorer."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    interval_cv_full: float = 0.15
    interval_cv_zero: float = 0.60
    concentration_floor: float = 0.6
    amount_rstd_full: float = 0.10
    amount_rstd_zero: float = 0.40
    keyword_tiers: dict[str, float] = Field(
        default_factory=lambda: {
            "loan_mortgage": 0.3,
            "utility": 0.3,
            "insurance": 0.3,
            "subscription": 0.2,
            "ach_autopay": 0.2,
            "contains_bill_keyword": 0.1,
            "has_account_number": 0.1,
        }
    )
    keyword_bonus_cap: float = 0.3
    interval_bands: list[IntervalMultiplierBand] = Field(
        default_factory=lambda: [
            IntervalMultiplierBand(name="monthly", min_days=28, max_days=32, multiplier=1.0),
            IntervalMultiplierBand(name="near_monthly", min_days=25, max_days=35, multiplier=0.8),
            IntervalMultiplierBand(name="biweekly", min_days=12, max_days=16, multiplier=0.7),
            IntervalMultiplierBand(name="quarterly", min_days=85, max_days=95, multiplier=0.6),
            IntervalMultiplierBand(name="weekly", min_days=6, max_days=8, multiplier=0.2),
        ]
    )
    default_multiplier: float = 0.3
    fixed_threshold: float = 0.85
    not_fixed_threshold: float = 0.15


class DetectionConfig(BaseModel):
    """Rules for merging external classifications and subscription fallback."""

    llm_min_confidence: float = 0.7
    llm_min_reasoning_score: float = 0.7
    subscription_lookback_days: int = 45


class SheetConfig(BaseModel):
    """Configuration for a report sheet."""

    enabled: bool = True
    name: str


class SheetsConfig(BaseModel):
    """Configuration for all report sheets."""

    summary: SheetConfig = Field(default_factory=lambda: SheetConfig(name="Summary"))
    to_insert: SheetConfig = Field(default_factory=lambda: SheetConfig(name="To Insert"))
    pending_deleted: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Pending To Delete")
    )
    fixed_expenses: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Fixed Expenses")
    )
    merchant_scores: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Merchant Scores")
    )
    subscription_candidates: SheetConfig = Field(
        default_factory=lambda: SheetConfig(name="Subscription Candidates")
    )


class ExcelOutputConfig(BaseModel):
    """Configuration for Excel output."""

    filename_template: str = "{kind}_report_{date}_{time}.xlsx"


class OutputConfig(BaseModel):
    """Configuration for output."""

    excel: ExcelOutputConfig = Field(default_factory=ExcelOutputConfig)
    sheets: SheetsConfig = Field(default_factory=SheetsConfig)


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ReconConfig(BaseModel):
    """Main configuration model."""

    input: InputConfig = Field(default_factory=InputConfig)
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_file_path: Optional[str] = None


def get_default_config() -> dict[str, Any]:
    """Return the default configuration as a dictionary."""
    return ReconConfig().model_dump(exclude={"config_file_path"})


def load_config(config_path: Optional[Path] = None) -> ReconConfig:
    """
    Load configuration from a YAML file or use defaults.

    Args:
        config_path: Path to YAML configuration file (optional)

    Returns:
        ReconConfig object with loaded or default settings

    Raises:
        ConfigurationError: If the file is not valid YAML or fails validation
    """
    config_dict = get_default_config()

    if config_path and config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, "r") as f:
                user_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigurationError(
                f"Configuration file {config_path} must contain a mapping"
            )

        # Deep merge user config into defaults
        config_dict = _deep_merge(config_dict, user_config)
        config_dict["config_file_path"] = str(config_path)
    else:
        logger.info("Using default configuration")

    try:
        return ReconConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def _deep_merge(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Dictionary to merge on top

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def generate_default_config(output_path: Path) -> None:
    """
    Generate a default configuration file.

    Args:
        output_path: Path to write the configuration file
    """
    config_dict = get_default_config()

    yaml_content = """# Statement reconciliation and fixed-expense detection configuration
# Generated configuration file - customize as needed

"""
    yaml_content += yaml.dump(config_dict, default_flow_style=False, sort_keys=False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w") as f:
        f.write(yaml_content)

    logger.info(f"Generated configuration file: {output_path}")
