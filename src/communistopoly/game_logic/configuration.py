"""Rule constants for a game of Communistopoly."""

from __future__ import annotations

from functools import cache

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict


class RulesConfiguration(BaseModel):
    """Immutable representation of the numeric rules for one game."""

    model_config = ConfigDict(frozen=True)

    starting_rubles: int = Field(ge=0)
    stoy_travel_tax: int = Field(ge=0)
    hammer_stoy_bonus: int = Field(ge=0)
    pilfer_amount: int = Field(ge=0)
    pilfer_threshold: int = Field(ge=1, le=6)
    gulag_escape_cost: int = Field(ge=0)
    gulag_max_turns: int = Field(ge=1)
    max_consecutive_doubles: int = Field(ge=1)
    voucher_expiry_rounds: int = Field(ge=1)
    informant_bonus: int = Field(ge=0)
    inform_innocent_extension: int = Field(ge=0)
    commissar_witnesses: int = Field(ge=0)
    rank_discounts: tuple[int, int, int, int]
    mortgage_rate: float = Field(gt=0, le=1)
    unmortgage_rate: float = Field(gt=0)
    collectivization_cost: int = Field(ge=0)
    people_palace_cost: int = Field(ge=0)
    sickle_harvest_limit: int = Field(ge=0)
    sickle_motherland_fine: int = Field(ge=0)
    tank_requisition: int = Field(ge=0)
    lenin_speech_payment: int = Field(ge=0)
    lenin_standing_fine: int = Field(ge=0)
    bread_loaf_cap: int = Field(ge=0)
    starving_threshold: int = Field(ge=0)
    favour_interest_rate: float = Field(ge=0)
    breadline_contribution: int = Field(ge=0)
    revolutionary_rate: float = Field(ge=0, le=1)
    revolutionary_flat: int = Field(ge=0)
    bourgeois_tax: int = Field(ge=0)
    bourgeois_wealthiest_tax: int = Field(ge=0)
    failed_tests_before_demotion: int = Field(ge=1)
    five_year_plan_bonus: int = Field(ge=0)
    hero_duration_rounds: int = Field(ge=1)

    def discount_for(self, rank_position: int) -> int:
        """Return the purchase discount percentage for a rank index."""
        return self.rank_discounts[rank_position]

    def collectivization_cost_for(self, level: int) -> int:
        """Return the cost of building *level* (1-5)."""
        return self.people_palace_cost if level == 5 else self.collectivization_cost  # noqa: PLR2004


class RulesDefaults(BaseSettings):
    """Load default rule values from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="COMMUNISTOPOLY_RULES_",
        extra="ignore",
    )

    starting_rubles: int = Field(default=1_500, ge=0)
    stoy_travel_tax: int = Field(default=200, ge=0)
    hammer_stoy_bonus: int = Field(default=50, ge=0)
    pilfer_amount: int = Field(default=100, ge=0)
    pilfer_threshold: int = Field(default=4, ge=1, le=6)
    gulag_escape_cost: int = Field(default=500, ge=0)
    gulag_max_turns: int = Field(default=10, ge=1)
    max_consecutive_doubles: int = Field(default=3, ge=1)
    voucher_expiry_rounds: int = Field(default=3, ge=1)
    informant_bonus: int = Field(default=100, ge=0)
    inform_innocent_extension: int = Field(default=2, ge=0)
    commissar_witnesses: int = Field(default=2, ge=0)
    rank_discounts: tuple[int, int, int, int] = (0, 10, 20, 50)
    mortgage_rate: float = Field(default=0.5, gt=0, le=1)
    unmortgage_rate: float = Field(default=0.6, gt=0)
    collectivization_cost: int = Field(default=100, ge=0)
    people_palace_cost: int = Field(default=200, ge=0)
    sickle_harvest_limit: int = Field(default=150, ge=0)
    sickle_motherland_fine: int = Field(default=25, ge=0)
    tank_requisition: int = Field(default=50, ge=0)
    lenin_speech_payment: int = Field(default=100, ge=0)
    lenin_standing_fine: int = Field(default=50, ge=0)
    bread_loaf_cap: int = Field(default=1_000, ge=0)
    starving_threshold: int = Field(default=100, ge=0)
    favour_interest_rate: float = Field(default=0.2, ge=0)
    breadline_contribution: int = Field(default=50, ge=0)
    revolutionary_rate: float = Field(default=0.15, ge=0, le=1)
    revolutionary_flat: int = Field(default=200, ge=0)
    bourgeois_tax: int = Field(default=100, ge=0)
    bourgeois_wealthiest_tax: int = Field(default=200, ge=0)
    failed_tests_before_demotion: int = Field(default=2, ge=1)
    five_year_plan_bonus: int = Field(default=100, ge=0)
    hero_duration_rounds: int = Field(default=3, ge=1)

    def to_config(self) -> RulesConfiguration:
        """Convert defaults into an immutable configuration object."""
        return RulesConfiguration(**self.model_dump())


class RulesOverrides(BaseModel):
    """Optional per-game overrides for individual rule values."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    starting_rubles: int | None = Field(default=None, ge=0)
    stoy_travel_tax: int | None = Field(default=None, ge=0)
    pilfer_amount: int | None = Field(default=None, ge=0)
    gulag_escape_cost: int | None = Field(default=None, ge=0)
    gulag_max_turns: int | None = Field(default=None, ge=1)
    voucher_expiry_rounds: int | None = Field(default=None, ge=1)
    informant_bonus: int | None = Field(default=None, ge=0)
    bread_loaf_cap: int | None = Field(default=None, ge=0)

    def apply(self, config: RulesConfiguration) -> RulesConfiguration:
        """Return a copy of *config* with the non-empty overrides applied."""
        updates = self.model_dump(exclude_none=True)
        if not updates:
            return config
        return config.model_copy(update=updates)


@cache
def get_default_rules_configuration() -> RulesConfiguration:
    """Return the cached default rule configuration."""
    return RulesDefaults().to_config()


def build_rules_configuration(
    overrides: RulesOverrides | None = None,
) -> RulesConfiguration:
    """Construct a configuration for a game, applying optional overrides."""
    defaults = get_default_rules_configuration()
    if overrides is None:
        return defaults
    return overrides.apply(defaults)


__all__ = [
    "RulesConfiguration",
    "RulesDefaults",
    "RulesOverrides",
    "build_rules_configuration",
    "get_default_rules_configuration",
]
