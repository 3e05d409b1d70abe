"""Configuration management for the CryoSpace resolution engine."""

from pathlib import Path

import yaml
from pydantic import BaseModel, Field


class DiceConfig(BaseModel):
    """Random source configuration."""

    seed: int | None = None


class CombatConfig(BaseModel):
    """Numbers the resolver uses when the action text does not supply them."""

    default_armor_class: int = 10
    weapon_damage: str = "1d6"
    spell_damage: str = "1d8"
    spell_dc: int = 12
    skill_dc: int = 12
    interact_dc: int = 10
    death_save_dc: int = 10
    burning_damage: str = "1d6"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class AppConfig(BaseModel):
    """Main application configuration."""

    dice: DiceConfig = Field(default_factory=DiceConfig)
    combat: CombatConfig = Field(default_factory=CombatConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_config(config_path: Path | str | None = None) -> AppConfig:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to ./cryospace.yaml

    Returns:
        AppConfig instance with loaded or default values
    """
    if config_path is None:
        config_path = Path("cryospace.yaml")
    else:
        config_path = Path(config_path)

    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return AppConfig(**data)

    return AppConfig()


def save_config(config: AppConfig, config_path: Path | str | None = None) -> None:
    """Save configuration to YAML file.

    Args:
        config: AppConfig instance to save
        config_path: Path to save to. Defaults to ./cryospace.yaml
    """
    if config_path is None:
        config_path = Path("cryospace.yaml")
    else:
        config_path = Path(config_path)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)


# Global config instance
_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get the global configuration instance.

    Returns:
        The loaded AppConfig instance
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: Path | str | None = None) -> AppConfig:
    """Reload configuration from disk.

    Args:
        config_path: Path to config file

    Returns:
        Newly loaded AppConfig instance
    """
    global _config
    _config = load_config(config_path)
    return _config
