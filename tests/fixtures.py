'''
Shared test fixtures for the rbmigrate test suite.

Import specific names into each test file rather than using wildcard imports.
'''

import datetime
import plistlib
from typing import Any

from rbmigrate.itunes import Track, TrackId, Playlist

# Dates and their epoch seconds
DATE_ADDED           = datetime.datetime(2020, 1, 1, tzinfo=datetime.timezone.utc)
DATE_ADDED_EPOCH     = '1577836800'
DATE_PLAYED          = datetime.datetime(2021, 1, 1, tzinfo=datetime.timezone.utc)
DATE_PLAYED_EPOCH    = '1609459200'
DATE_MODIFIED        = datetime.datetime(2022, 1, 1, tzinfo=datetime.timezone.utc)

UNKNOWN_ARTIST = '未知'

# XML fixture: single song ENTRY matching track A
ENTRY_XML = '''<entry type="song">
    <title>Song</title>
    <artist>X</artist>
    <album>Y</album>
    <track-number>1</track-number>
    <disc-number>1</disc-number>
    <location>file:///music/a.mp3</location>
  </entry>'''

# XML fixture: database with songs matching tracks A and B, a song without a match and a radio station
RHYTHMDB_XML = '''<?xml version="1.0" standalone="yes"?>
<rhythmdb version="2.0">
  <entry type="song">
    <title>Song</title>
    <artist>X</artist>
    <album>Y</album>
    <track-number>1</track-number>
    <disc-number>1</disc-number>
    <location>file:///music/a.mp3</location>
  </entry>
  <entry type="song">
    <title>Song</title>
    <artist>X</artist>
    <album>Y</album>
    <track-number>2</track-number>
    <disc-number>1</disc-number>
    <location>file:///music/b.mp3</location>
    <play-count>7</play-count>
  </entry>
  <entry type="song">
    <title>Lonely</title>
    <artist>Nobody</artist>
    <location>file:///music/lonely.mp3</location>
  </entry>
  <entry type="iradio">
    <title>Radio</title>
    <location>http://radio.example/stream</location>
  </entry>
</rhythmdb>
'''

# XML fixture: playlists document with one existing playlist
PLAYLISTS_XML = '''<?xml version="1.0"?>
<rhythmdb-playlists>
  <playlist name="Existing" show-browser="false" browser-position="180" search-type="search-match" type="static">
    <location>file:///music/old.mp3</location>
  </playlist>
</rhythmdb-playlists>
'''

def create_track(track_id: int,
                 name: str = 'Song',
                 artist: str | None = 'X',
                 album: str | None = 'Y',
                 disc_number: int | None = 1,
                 track_number: int | None = 1,
                 play_count: int | None = None,
                 play_date: datetime.datetime | None = None,
                 movie: bool = False) -> Track:
    '''Creates a Track with fixed dates and a location derived from the ID.'''
    return Track(
        id=TrackId(track_id),
        name=name,
        artist=artist,
        album=album,
        disc_number=disc_number,
        track_number=track_number,
        date_modified=DATE_MODIFIED,
        date_added=DATE_ADDED,
        play_count=play_count,
        play_date=play_date,
        movie=movie,
        location=f"file:///itunes/{track_id}.mp3",
    )

def create_playlist(name: str, items: list[int], smart: bool = False) -> Playlist:
    return Playlist(name=name, id=100, smart=smart, items=[TrackId(i) for i in items])

def create_track_record(track_id: int, **fields: Any) -> dict[str, Any]:
    '''Creates a plist track dictionary as found in an iTunes export.'''
    record: dict[str, Any] = {
        'Track ID'      : track_id,
        'Name'          : 'Song',
        'Artist'        : 'X',
        'Album'         : 'Y',
        'Disc Number'   : 1,
        'Track Number'  : 1,
        'Date Modified' : DATE_MODIFIED.replace(tzinfo=None),
        'Date Added'    : DATE_ADDED.replace(tzinfo=None),
        'Location'      : f"file:///itunes/{track_id}.mp3",
    }
    record.update(fields)
    return {key: value for key, value in record.items() if value is not None}

def write_library(path: str, tracks: list[dict[str, Any]], playlists: list[dict[str, Any]]) -> None:
    '''Writes an iTunes XML library export to `path`.'''
    plist = {
        'Major Version' : 1,
        'Minor Version' : 1,
        'Tracks'        : {str(track['Track ID']): track for track in tracks},
        'Playlists'     : playlists,
    }
    with open(path, 'wb') as file:
        plistlib.dump(plist, file)
