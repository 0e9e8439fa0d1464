'''
Runtime configuration loaded from environment variables with local defaults.

Import this module instead of constants.py for any configurable value.
For testing against a scratch Rhythmbox directory, set environment variables before running:

    export RBMIGRATE_RHYTHMBOX_PATH=/tmp/rbmigrate_test/rhythmbox
    export RBMIGRATE_LOG_DIR=/tmp/rbmigrate_test/logs
    export RBMIGRATE_UNKNOWN_ARTIST=Unknown
'''

import os
from pathlib import Path

from . import constants

# Project paths
PROJECT_ROOT = Path(os.getenv('RBMIGRATE_PROJECT_ROOT', str(constants.PROJECT_ROOT)))
LOG_DIR      = Path(os.getenv('RBMIGRATE_LOG_DIR', str(PROJECT_ROOT / 'logs')))

# Rhythmbox
RHYTHMBOX_PATH = os.getenv('RBMIGRATE_RHYTHMBOX_PATH')  # fallback to the XDG data dir if None
UNKNOWN_ARTIST = os.getenv('RBMIGRATE_UNKNOWN_ARTIST', constants.UNKNOWN_ARTIST)

def default_rhythmbox_path() -> Path:
    '''Returns the Rhythmbox data directory: the configured path if present,
    otherwise $XDG_DATA_HOME/rhythmbox or ~/.local/share/rhythmbox.'''
    if RHYTHMBOX_PATH:
        return Path(RHYTHMBOX_PATH)

    data_home = os.environ.get('XDG_DATA_HOME')
    if data_home:
        return Path(data_home) / constants.RHYTHMBOX_DIRNAME
    return Path.home() / '.local' / 'share' / constants.RHYTHMBOX_DIRNAME
