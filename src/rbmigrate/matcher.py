'''
# Summary
Matches Rhythmbox song entries to iTunes tracks and merges the iTunes play history into them.

    - build_track_map:  Indexes the iTunes tracks by TrackKey, failing on duplicate keys.
    - sync_entries:     Matches and merges every song entry of a loaded database tree.
    - sync_database:    Loads, synchronizes and saves 'rhythmdb.xml'.

# Assumptions
* No two iTunes tracks (movies excluded) share a TrackKey.
* The iTunes library is authoritative for first-seen, last-played and play-count.
'''

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from . import common
from . import constants
from . import rhythmdb
from . import track_key
from .itunes import Track, TrackId
from .rhythmdb import DatabaseFormatError, Overwrite
from .track_key import TrackKey

class DuplicateTrackError(ValueError):
    '''Raised when two iTunes tracks produce the same TrackKey.'''

# Data classes
@dataclass
class SyncResult:
    '''Results from synchronizing the Rhythmbox database.'''
    locations: dict[TrackId, str] = field(default_factory=dict)
    matched: int = 0
    unmatched: list[TrackKey] = field(default_factory=list)
    unused: list[Track] = field(default_factory=list)
    overwrites: list[Overwrite] = field(default_factory=list)

class UsageTracker:
    '''Records which iTunes tracks were consumed by a Rhythmbox entry.'''

    def __init__(self, tracks: list[Track]) -> None:
        self._tracks = tracks
        self._used: set[TrackId] = set()

    def mark_used(self, track: Track) -> None:
        self._used.add(track.id)

    def is_used(self, track: Track) -> bool:
        return track.id in self._used

    def unused(self) -> list[Track]:
        '''Returns the tracks never marked as used, in library order.'''
        return [track for track in self._tracks if track.id not in self._used]

def build_track_map(tracks: list[Track]) -> dict[TrackKey, Track]:
    '''Returns the tracks indexed by TrackKey.

    Raises:
        DuplicateTrackError: Two tracks share a key.
    '''
    track_map: dict[TrackKey, Track] = {}
    for track in tracks:
        key = track_key.from_track(track)
        existing = track_map.get(key)
        if existing is not None:
            raise DuplicateTrackError(f"duplicate song in iTunes library: {key} "
                                      f"(tracks {existing.id} and {track.id})")
        track_map[key] = track
    return track_map

def read_entry(entry: ET.Element, unknown_artist: str) -> tuple[TrackKey, str]:
    '''Returns the key and location of a song entry.

    Raises:
        DatabaseFormatError: The entry has no title or location, or a malformed number.
    '''
    title = rhythmdb.child_text(entry, constants.TAG_TITLE)
    if title is None:
        raise DatabaseFormatError('song without title')
    location = rhythmdb.child_text(entry, constants.TAG_LOCATION)
    if location is None:
        raise DatabaseFormatError(f"song without location: '{title}'")

    try:
        key = track_key.from_entry_fields(
            title,
            rhythmdb.child_text(entry, constants.TAG_ARTIST),
            rhythmdb.child_text(entry, constants.TAG_ALBUM),
            rhythmdb.child_text(entry, constants.TAG_DISC_NUMBER),
            rhythmdb.child_text(entry, constants.TAG_TRACK_NUMBER),
            unknown_artist)
    except ValueError as e:
        raise DatabaseFormatError(f"malformed song '{title}' at '{location}': {e}") from e
    return key, location

def sync_entries(root: ET.Element, track_map: dict[TrackKey, Track], unknown_artist: str) -> SyncResult:
    '''Merges the matching iTunes track into every song entry of the database `root`.

    Entries of other types are left untouched. Unmatched entries and unused tracks are
    logged as warnings and returned.

    Args:
        root: The 'rhythmdb' root element, updated in place.
        track_map: iTunes tracks indexed by key, see `build_track_map`.
        unknown_artist: The artist value Rhythmbox uses for songs without one.
    '''
    result = SyncResult()
    usage = UsageTracker(list(track_map.values()))

    for entry in root:
        if entry.tag != constants.TAG_ENTRY:
            raise DatabaseFormatError(f"unknown element in database: '{entry.tag}'")
        if entry.get(constants.ATTR_TYPE) != constants.ENTRY_TYPE_SONG:
            continue

        key, location = read_entry(entry, unknown_artist)
        track = track_map.get(key)
        if track is None:
            logging.warning(f"song {key} not found")
            result.unmatched.append(key)
            continue

        if usage.is_used(track):
            logging.warning(f"song {key} is matched by more than one entry, keeping location "
                            f"'{result.locations[track.id]}' over '{location}'")
        else:
            usage.mark_used(track)
            result.locations[track.id] = location
        logging.debug(f"matched song {key} to track {track.id}")
        result.matched += 1
        result.overwrites.extend(rhythmdb.merge_entry(entry, track, key))

    result.unused = usage.unused()
    for track in result.unused:
        logging.warning(f"song {track_key.from_track(track)} unused")

    logging.info(f"matched {result.matched} songs, {len(result.unmatched)} not found, "
                 f"{len(result.unused)} iTunes tracks unused")
    return result

def sync_database(rhythmdb_path: str,
                  track_map: dict[TrackKey, Track],
                  unknown_artist: str,
                  dry_run: bool = False) -> SyncResult:
    '''Synchronizes the iTunes play history into the Rhythmbox database at `rhythmdb_path`.
    The file is written only after every entry was processed.'''
    logging.info('Reading Rhythmbox database...')
    root = rhythmdb.load_database(rhythmdb_path)

    logging.info('Synchronizing to Rhythmbox database...')
    result = sync_entries(root, track_map, unknown_artist)

    if dry_run:
        common.log_dry_run('write database', rhythmdb_path)
    else:
        logging.info('Saving the change to Rhythmbox database...')
        rhythmdb.write_root(root, rhythmdb_path)
    return result
