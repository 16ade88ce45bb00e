# Utils package
from .paths import (
    find_steam_path,
    find_pictures_path,
    get_userdata_path,
    get_user_screenshots_root,
    get_app_screenshots_path,
    get_shortcuts_vdf_path,
    SETTINGS_PATH,
    DEFAULT_PICTURES_DIRECTORY_NAME,
)
from .shortcut_id import shortcut_identity

__all__ = [
    'find_steam_path',
    'find_pictures_path',
    'get_userdata_path',
    'get_user_screenshots_root',
    'get_app_screenshots_path',
    'get_shortcuts_vdf_path',
    'shortcut_identity',
    'SETTINGS_PATH',
    'DEFAULT_PICTURES_DIRECTORY_NAME',
]
