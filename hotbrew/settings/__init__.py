"""User configuration (``hotbrew.yaml``) and source profiles."""
from hotbrew.settings.config import (
    CustomThemeConfig,
    HotbrewConfig,
    SourceSettings,
    config_dir,
    config_path,
    default_config,
    init_config,
    load_config,
    save_config,
)
from hotbrew.settings.profile import (
    Profile,
    ProfileInfo,
    SourceSpec,
    default_profile,
    ensure_default_profile,
    list_profiles,
    load_profile,
    save_profile,
)

__all__ = [
    "CustomThemeConfig",
    "HotbrewConfig",
    "Profile",
    "ProfileInfo",
    "SourceSettings",
    "SourceSpec",
    "config_dir",
    "config_path",
    "default_config",
    "default_profile",
    "ensure_default_profile",
    "init_config",
    "list_profiles",
    "load_config",
    "load_profile",
    "save_config",
    "save_profile",
]
