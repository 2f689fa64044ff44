from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment."""

    model_config = SettingsConfigDict(env_prefix="CLASHCORE_", env_file=".env")

    # Match rules (frozen into RulesOptions at match setup)
    hand_size: int = 5
    energy_per_turn: int = 5
    line_size: int = 3
    move_cost: int = 1
    movement_enabled: bool = True

    # Tooling
    default_seed: int = 424242
    max_auto_turns: int = 40
    log_level: str = "INFO"


settings = Settings()
