'''
# Summary
Migrates the static iTunes playlists into the Rhythmbox playlists document.

Playlist items refer to iTunes track IDs, which are resolved to Rhythmbox locations through
the map produced when synchronizing the database. Items without a location are skipped and
counted. Smart playlists are rule based and are skipped entirely.
'''

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from . import common
from . import constants
from . import rhythmdb
from .itunes import Playlist, TrackId

# Data classes
@dataclass
class PlaylistResult:
    '''Results from migrating a single playlist.'''
    name: str
    resolved: int
    unfound: int

@dataclass
class PlaylistMigrationResult:
    '''Complete results from migrating the playlists.'''
    playlists: list[PlaylistResult] = field(default_factory=list)
    skipped_smart: list[str] = field(default_factory=list)

def create_playlist_element(playlist: Playlist, locations: dict[TrackId, str]) -> tuple[ET.Element, PlaylistResult]:
    '''Builds a static Rhythmbox playlist element, in item order, from `playlist`.

    Returns:
        The element and the counts of resolved and unfound items.
    '''
    element = ET.Element(constants.TAG_PLAYLIST, {
        constants.ATTR_NAME : playlist.name,
        constants.ATTR_TYPE : constants.PLAYLIST_TYPE_STATIC,
    })
    element.text = constants.INDENT_LOCATION

    unfound = 0
    for track_id in playlist.items:
        location = locations.get(track_id)
        if location is None:
            unfound += 1
            continue
        ET.SubElement(element, constants.TAG_LOCATION).text = location
        element[-1].tail = constants.INDENT_LOCATION

    if len(element) > 0:
        element[-1].tail = constants.INDENT_PLAYLIST
    else:
        # written as an empty element instead of being dropped
        element.text = None
    element.tail = constants.INDENT_PLAYLIST

    return element, PlaylistResult(name=playlist.name, resolved=len(element), unfound=unfound)

def migrate_playlists(root: ET.Element, playlists: list[Playlist], locations: dict[TrackId, str]) -> PlaylistMigrationResult:
    '''Appends every non-smart playlist to the playlists document `root`, in library order.

    Args:
        root: The 'rhythmdb-playlists' root element, updated in place.
        playlists: The iTunes playlists.
        locations: Rhythmbox location of every matched iTunes track.
    '''
    result = PlaylistMigrationResult()
    elements: list[ET.Element] = []

    for playlist in playlists:
        if playlist.smart:
            logging.warning(f"playlist {playlist.name} is skipped because it's smart")
            result.skipped_smart.append(playlist.name)
            continue

        element, playlist_result = create_playlist_element(playlist, locations)
        elements.append(element)
        result.playlists.append(playlist_result)
        logging.debug(f"migrated playlist {playlist.name}: {playlist_result.resolved} items")
        if playlist_result.unfound > 0:
            logging.warning(f"{playlist_result.unfound} items in playlist {playlist.name} are not found")

    if elements:
        # continue the indentation of the existing playlists
        if len(root) > 0:
            root[-1].tail = constants.INDENT_PLAYLIST
        else:
            root.text = constants.INDENT_PLAYLIST
        root.extend(elements)
        root[-1].tail = constants.INDENT_CLOSE

    logging.info(f"migrated {len(result.playlists)} playlists, skipped {len(result.skipped_smart)} smart playlists")
    return result

def migrate_playlists_file(playlists_path: str,
                           playlists: list[Playlist],
                           locations: dict[TrackId, str],
                           dry_run: bool = False) -> PlaylistMigrationResult:
    '''Migrates the playlists into the Rhythmbox playlists file at `playlists_path`.
    The file is written only after every playlist was processed.'''
    logging.info('Reading Rhythmbox playlists...')
    root = rhythmdb.load_playlists(playlists_path)

    logging.info('Migrating playlists...')
    result = migrate_playlists(root, playlists, locations)

    if dry_run:
        common.log_dry_run('write playlists', playlists_path)
    else:
        logging.info('Saving the playlists...')
        rhythmdb.write_root(root, playlists_path)
    return result
