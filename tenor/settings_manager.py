"""
Settings Manager for tenor
Manages application settings stored in JSON file
"""

import json
import os
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    'docker_socket_path': '',
    'request_timeout': 60,
    'max_concurrent_requests': 8,
    'api_version': '',
    'stop_timeout': None,
    'log_level': 'INFO',
}


class SettingsManager:
    """Manager for application settings"""

    @staticmethod
    def get_user_settings_path() -> str:
        """Get path to user settings file"""
        if os.name == 'nt':  # Windows
            base_dir = os.environ.get('APPDATA', os.path.expanduser('~'))
            data_dir = os.path.join(base_dir, 'tenor')
        else:  # macOS, Linux
            data_dir = os.path.join(
                os.environ.get('XDG_DATA_HOME', os.path.expanduser('~/.local/share')),
                'tenor'
            )
        return os.path.join(data_dir, 'settings.json')

    def __init__(self, settings_file: Optional[str] = None):
        """
        Initialize settings manager

        Args:
            settings_file: Settings file path (default: per-user data directory)
        """
        self.settings_file = settings_file or self.get_user_settings_path()
        self.settings: Dict[str, Any] = {}

        self.load()

    def load(self):
        """
        Load settings from user file

        User values override defaults. A missing file means defaults; an
        unreadable one is reported and replaced by defaults in memory only.
        """
        self.settings = dict(DEFAULT_SETTINGS)
        if not os.path.exists(self.settings_file):
            logger.debug(f"No settings file at {self.settings_file}, using defaults")
            return

        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                loaded_settings = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load settings from {self.settings_file}: {e}")
            return

        if not isinstance(loaded_settings, dict):
            logger.warning(f"Ignoring settings file {self.settings_file}: not a JSON object")
            return

        self.settings.update(loaded_settings)
        logger.debug(f"Settings loaded from {self.settings_file}")

    def save(self) -> bool:
        """Save settings to file"""
        try:
            os.makedirs(os.path.dirname(self.settings_file) or '.', exist_ok=True)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                json.dump(self.settings, f, indent=4, ensure_ascii=False)

            logger.info(f"Settings saved to {self.settings_file}")
            return True

        except OSError as e:
            logger.error(f"Error saving settings: {e}")
            return False

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get setting value

        Args:
            key: Setting key
            default: Default value if key not found

        Returns:
            Setting value
        """
        return self.settings.get(key, default)

    def get_int(self, key: str) -> int:
        """Integer setting, falling back to the built-in default when invalid"""
        value = self.settings.get(key)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid value for setting {key}: {value!r}")
            return int(DEFAULT_SETTINGS[key])

    def get_optional_int(self, key: str) -> Optional[int]:
        """Integer setting that may be unset; an invalid value counts as unset"""
        value = self.settings.get(key)
        if value is None or value == '':
            return None
        if isinstance(value, bool):
            logger.warning(f"Invalid value for setting {key}: {value!r}")
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid value for setting {key}: {value!r}")
            return None

    @staticmethod
    def unknown_keys(keys) -> List[str]:
        """Keys that are not tenor settings"""
        return sorted(key for key in keys if key not in DEFAULT_SETTINGS)

    def set(self, key: str, value: Any, save: bool = True) -> bool:
        """
        Set setting value

        Args:
            key: Setting key
            value: Setting value
            save: Save to file immediately

        Returns:
            False if the file could not be written
        """
        return self.update({key: value}, save=save)

    def update(self, settings_dict: Dict[str, Any], save: bool = True) -> bool:
        """
        Update multiple settings

        Args:
            settings_dict: Dictionary of settings to update
            save: Save to file immediately

        Returns:
            False if the file could not be written

        Raises:
            KeyError: for keys that are not tenor settings
        """
        unknown = self.unknown_keys(settings_dict)
        if unknown:
            raise KeyError(f"Unknown settings: {', '.join(unknown)}")
        self.settings.update(settings_dict)
        return self.save() if save else True

    def reset_to_defaults(self, save: bool = True) -> bool:
        """
        Reset all settings to defaults

        Args:
            save: Save to file immediately
        """
        self.settings = dict(DEFAULT_SETTINGS)
        if not save:
            return True
        saved = self.save()
        if saved:
            logger.info("Settings reset to defaults")
        return saved

    def get_all(self) -> Dict[str, Any]:
        """Get all settings"""
        return self.settings.copy()
