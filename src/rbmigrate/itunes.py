'''
# Summary
Reads an iTunes "Library.xml" export into plain track and playlist records.

The export is an XML property list with a 'Tracks' dictionary keyed by track ID and an
ordered 'Playlists' list. Only the fields used by the migration are kept. Movies are not
music and are stripped with `strip_movies` before anything else sees the library.
'''

import datetime
import logging
import plistlib
from dataclasses import dataclass, field
from typing import Any
from xml.parsers.expat import ExpatError

from . import constants

class LibraryFormatError(ValueError):
    '''Raised when the iTunes library export is malformed.'''

@dataclass(frozen=True)
class TrackId:
    '''Identifier of a track, unique within one iTunes library.'''
    value: int

    @classmethod
    def parse(cls, raw: int | str) -> 'TrackId':
        '''Builds a TrackId from an integer or a numeric string.

        Raises:
            ValueError: The value is not an unsigned 64 bit integer.
        '''
        if isinstance(raw, bool):
            raise ValueError(f"expected an unsigned integer for track id, got {raw!r}")
        if isinstance(raw, str):
            if not raw.isascii() or not raw.isdigit():
                raise ValueError(f"expected an unsigned integer for track id, got '{raw}'")
            raw = int(raw)
        if not isinstance(raw, int):
            raise ValueError(f"expected an unsigned integer for track id, got {raw!r}")
        if raw < 0 or raw > constants.TRACK_ID_MAX:
            raise ValueError(f"track id out of range: {raw}")
        return cls(raw)

    def __str__(self) -> str:
        return str(self.value)

@dataclass
class Track:
    '''A single track record of the iTunes library.'''
    id: TrackId
    name: str
    date_modified: datetime.datetime
    date_added: datetime.datetime
    location: str
    artist: str | None = None
    album: str | None = None
    genre: str | None = None
    disc_number: int | None = None
    track_number: int | None = None
    year: int | None = None
    play_count: int | None = None
    play_date: datetime.datetime | None = None
    skip_count: int | None = None
    skip_date: datetime.datetime | None = None
    rating: int | None = None
    movie: bool = False

@dataclass
class Playlist:
    name: str
    id: int
    smart: bool = False
    items: list[TrackId] = field(default_factory=list)

@dataclass
class Library:
    tracks: dict[TrackId, Track]
    playlists: list[Playlist]

# helper functions
def _require(record: dict[str, Any], key: str, kind: type, context: str) -> Any:
    value = _optional(record, key, kind, context)
    if value is None:
        raise LibraryFormatError(f"{context}: missing '{key}'")
    return value

def _optional(record: dict[str, Any], key: str, kind: type, context: str) -> Any:
    value = record.get(key)
    if value is None:
        return None
    # bool is a subclass of int, never accept it for a number
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise LibraryFormatError(f"{context}: expected {kind.__name__} for '{key}', got {value!r}")
    return value

def _count(record: dict[str, Any], key: str, context: str) -> int | None:
    value = _optional(record, key, int, context)
    if value is not None and value < 0:
        raise LibraryFormatError(f"{context}: negative value for '{key}': {value}")
    return value

def _date(record: dict[str, Any], key: str, context: str, required: bool = False) -> datetime.datetime | None:
    if required:
        value = _require(record, key, datetime.datetime, context)
    else:
        value = _optional(record, key, datetime.datetime, context)
    # plist dates are stored in UTC
    if value is not None and value.tzinfo is None:
        value = value.replace(tzinfo=datetime.timezone.utc)
    return value

def _track_id(raw: Any, context: str) -> TrackId:
    try:
        return TrackId.parse(raw)
    except ValueError as e:
        raise LibraryFormatError(f"{context}: {e}") from e

def parse_track(record: dict[str, Any]) -> Track:
    '''Builds a Track from one entry of the library 'Tracks' dictionary.'''
    if not isinstance(record, dict):
        raise LibraryFormatError(f"expected a dictionary for track, got {record!r}")
    track_id = _track_id(record.get(constants.KEY_TRACK_ID), 'track')
    context = f"track {track_id}"

    return Track(
        id=track_id,
        name=_require(record, constants.KEY_NAME, str, context),
        artist=_optional(record, constants.KEY_ARTIST, str, context),
        album=_optional(record, constants.KEY_ALBUM, str, context),
        genre=_optional(record, constants.KEY_GENRE, str, context),
        disc_number=_count(record, constants.KEY_DISC_NUMBER, context),
        track_number=_count(record, constants.KEY_TRACK_NUMBER, context),
        year=_count(record, constants.KEY_YEAR, context),
        date_modified=_date(record, constants.KEY_DATE_MODIFIED, context, required=True),
        date_added=_date(record, constants.KEY_DATE_ADDED, context, required=True),
        play_count=_count(record, constants.KEY_PLAY_COUNT, context),
        play_date=_date(record, constants.KEY_PLAY_DATE, context),
        skip_count=_count(record, constants.KEY_SKIP_COUNT, context),
        skip_date=_date(record, constants.KEY_SKIP_DATE, context),
        rating=_count(record, constants.KEY_RATING, context),
        movie=_optional(record, constants.KEY_MOVIE, bool, context) or False,
        location=_require(record, constants.KEY_LOCATION, str, context),
    )

def parse_playlist(record: dict[str, Any]) -> Playlist:
    '''Builds a Playlist from one entry of the library 'Playlists' list.
    Item order and repeated items are kept as given.'''
    if not isinstance(record, dict):
        raise LibraryFormatError(f"expected a dictionary for playlist, got {record!r}")
    name = _require(record, constants.KEY_NAME, str, 'playlist')
    context = f"playlist '{name}'"

    items: list[TrackId] = []
    for item in _optional(record, constants.KEY_PLAYLIST_ITEMS, list, context) or []:
        if not isinstance(item, dict):
            raise LibraryFormatError(f"{context}: expected a dictionary for item, got {item!r}")
        items.append(_track_id(item.get(constants.KEY_TRACK_ID), context))

    return Playlist(
        name=name,
        id=_count(record, constants.KEY_PLAYLIST_ID, context) or 0,
        smart=constants.KEY_SMART_INFO in record,
        items=items,
    )

def parse_library(plist: Any) -> Library:
    '''Builds a Library from the decoded property list of an iTunes export.'''
    if not isinstance(plist, dict):
        raise LibraryFormatError('expected a dictionary at the top level of the library')
    track_records = plist.get(constants.KEY_TRACKS)
    if not isinstance(track_records, dict):
        raise LibraryFormatError(f"missing '{constants.KEY_TRACKS}' dictionary")
    playlist_records = plist.get(constants.KEY_PLAYLISTS, [])
    if not isinstance(playlist_records, list):
        raise LibraryFormatError(f"expected a list for '{constants.KEY_PLAYLISTS}'")

    tracks: dict[TrackId, Track] = {}
    for key, record in track_records.items():
        track = parse_track(record)
        if _track_id(key, 'tracks') != track.id:
            raise LibraryFormatError(f"track {track.id} is stored under mismatched key '{key}'")
        tracks[track.id] = track

    playlists = [parse_playlist(record) for record in playlist_records]
    return Library(tracks=tracks, playlists=playlists)

def load_library(path: str) -> Library:
    '''Returns the Library read from the iTunes XML export at `path`.'''
    try:
        with open(path, 'rb') as file:
            plist = plistlib.load(file)
    except (plistlib.InvalidFileException, ExpatError, ValueError) as e:
        logging.error(f"unable to parse iTunes library at '{path}':\n{e}")
        raise LibraryFormatError(f"unable to parse iTunes library at '{path}'") from e

    library = parse_library(plist)
    logging.info(f"read {len(library.tracks)} tracks and {len(library.playlists)} playlists from '{path}'")
    return library

def strip_movies(library: Library) -> Library:
    '''Removes movie tracks from the library in place and returns it.'''
    movies = [track_id for track_id, track in library.tracks.items() if track.movie]
    for track_id in movies:
        del library.tracks[track_id]
    if movies:
        logging.debug(f"stripped {len(movies)} movies from library")
    return library
