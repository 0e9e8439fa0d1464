'''Configuration management for UI state.'''
import json
from enum import StrEnum
from pathlib import Path
from typing import Any, Optional

from rbmigrate import config

# Classes
class Key(StrEnum):
    ITUNES_LIBRARY_PATH = 'itunes_library_path'
    RHYTHMBOX_PATH      = 'rhythmbox_path'
    UNKNOWN_ARTIST      = 'unknown_artist'

class AppConfig:
    # Constants
    PATH = Path(__file__).parent.parent / 'config.json'
    TEMPLATE = {
        Key.ITUNES_LIBRARY_PATH : None,
        Key.RHYTHMBOX_PATH      : None,
        Key.UNKNOWN_ARTIST      : config.UNKNOWN_ARTIST
    }

    def __init__(self, data: dict[str, Any]) -> None:
        self.itunes_library_path : Optional[str] = data.get(Key.ITUNES_LIBRARY_PATH)
        self.rhythmbox_path      : Optional[str] = data.get(Key.RHYTHMBOX_PATH)
        self.unknown_artist      : Optional[str] = data.get(Key.UNKNOWN_ARTIST)

    def to_dict(self) -> dict[str, Any]:
        return {
            Key.ITUNES_LIBRARY_PATH : self.itunes_library_path,
            Key.RHYTHMBOX_PATH      : self.rhythmbox_path,
            Key.UNKNOWN_ARTIST      : self.unknown_artist
        }

    def validate(self) -> list[str]:
        '''Returns a message for each configured path that cannot be used for a migration.'''
        errors: list[str] = []
        if not self.itunes_library_path:
            errors.append('iTunes library path is not set')
        elif not Path(self.itunes_library_path).is_file():
            errors.append(f"iTunes library not found: {self.itunes_library_path}")
        if self.rhythmbox_path and not Path(self.rhythmbox_path).is_dir():
            errors.append(f"Rhythmbox directory not found: {self.rhythmbox_path}")
        return errors

    @staticmethod
    def load() -> 'AppConfig':
        '''Load UI configuration from disk.'''
        if not AppConfig.PATH.exists():
            AppConfig.save(AppConfig(dict(AppConfig.TEMPLATE)))

        with open(AppConfig.PATH, encoding='utf-8') as file:
            return AppConfig(json.load(file))

    @staticmethod
    def save(app_config: 'AppConfig') -> None:
        '''Save UI configuration to disk.'''
        AppConfig.PATH.parent.mkdir(parents=True, exist_ok=True)
        with open(AppConfig.PATH, 'w', encoding='utf-8') as file:
            json.dump(app_config.to_dict(), file, indent=2, ensure_ascii=False)
