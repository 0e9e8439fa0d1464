# project data
from pathlib import Path
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Rhythmbox data files
RHYTHMDB_FILENAME         = 'rhythmdb.xml'
RHYTHMDB_BACKUP_FILENAME  = 'rhythmdb.xml.bak'
PLAYLISTS_FILENAME        = 'playlists.xml'
PLAYLISTS_BACKUP_FILENAME = 'playlists.xml.bak'
RHYTHMBOX_DIRNAME         = 'rhythmbox'

# Rhythmbox database
TAG_RHYTHMDB   = 'rhythmdb'
TAG_ENTRY      = 'entry'
ATTR_VERSION   = 'version'
ATTR_TYPE      = 'type'
ENTRY_TYPE_SONG = 'song'
SUPPORTED_DATABASE_VERSIONS = {'2.0'}

## entry children
TAG_TITLE        = 'title'
TAG_ARTIST       = 'artist'
TAG_ALBUM        = 'album'
TAG_DISC_NUMBER  = 'disc-number'
TAG_TRACK_NUMBER = 'track-number'
TAG_LOCATION     = 'location'
TAG_FIRST_SEEN   = 'first-seen'
TAG_LAST_PLAYED  = 'last-played'
TAG_PLAY_COUNT   = 'play-count'

# the value rhythmbox stores for a song without artist metadata
UNKNOWN_ARTIST = '未知'

# Rhythmbox playlists
TAG_PLAYLISTS       = 'rhythmdb-playlists'
TAG_PLAYLIST        = 'playlist'
ATTR_NAME           = 'name'
PLAYLIST_TYPE_STATIC = 'static'

## layout of playlists.xml as written by rhythmbox
INDENT_PLAYLIST = '\n  '
INDENT_LOCATION = '\n    '
INDENT_CLOSE    = '\n'

# iTunes library keys
KEY_TRACKS          = 'Tracks'
KEY_PLAYLISTS       = 'Playlists'
KEY_TRACK_ID        = 'Track ID'
KEY_NAME            = 'Name'
KEY_ARTIST          = 'Artist'
KEY_ALBUM           = 'Album'
KEY_GENRE           = 'Genre'
KEY_DISC_NUMBER     = 'Disc Number'
KEY_TRACK_NUMBER    = 'Track Number'
KEY_YEAR            = 'Year'
KEY_DATE_MODIFIED   = 'Date Modified'
KEY_DATE_ADDED      = 'Date Added'
KEY_PLAY_COUNT      = 'Play Count'
KEY_PLAY_DATE       = 'Play Date UTC'
KEY_SKIP_COUNT      = 'Skip Count'
KEY_SKIP_DATE       = 'Skip Date'
KEY_RATING          = 'Rating'
KEY_MOVIE           = 'Movie'
KEY_LOCATION        = 'Location'
KEY_PLAYLIST_ID     = 'Playlist ID'
KEY_SMART_INFO      = 'Smart Info'
KEY_PLAYLIST_ITEMS  = 'Playlist Items'

# largest value a track ID may hold (unsigned 64 bit)
TRACK_ID_MAX = 2**64 - 1
