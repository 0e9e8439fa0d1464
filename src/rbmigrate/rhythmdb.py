'''
# Summary
Reads, validates, writes and surgically updates the Rhythmbox XML documents.

Rhythmbox keeps its library in 'rhythmdb.xml' and its playlists in 'playlists.xml'. Both
files are also maintained by Rhythmbox itself, so updates touch only the children they
need and new children copy the indentation of their siblings. Everything else in the tree,
including the text and tail whitespace of untouched nodes, is written back as it was read.
'''

import datetime
import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from . import constants
from .itunes import Track
from .track_key import TrackKey

class DatabaseFormatError(ValueError):
    '''Raised when a Rhythmbox document does not have the expected structure.'''

@dataclass
class Overwrite:
    '''A pre-existing entry value replaced with a value from iTunes.'''
    key: TrackKey
    tag: str
    old: str
    new: str

# Tree I/O
def load_tree(path: str) -> ET.Element:
    '''Returns the root node of the XML document at `path`.'''
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        logging.error(f"unable to parse XML document at '{path}':\n{e}")
        raise
    return tree.getroot()

def write_root(root: ET.Element, file_path: str) -> None:
    '''Writes the document with an XML declaration, ending with a newline as Rhythmbox does.'''
    tree = ET.ElementTree(root)
    with open(file_path, 'wb') as file:
        tree.write(file, encoding='UTF-8', xml_declaration=True)
        file.write(b'\n')

def check_database(root: ET.Element) -> None:
    '''Raises DatabaseFormatError unless `root` is a supported Rhythmbox database.'''
    if root.tag != constants.TAG_RHYTHMDB:
        raise DatabaseFormatError(f"unknown database format: root element '{root.tag}'")
    version = root.get(constants.ATTR_VERSION)
    if version not in constants.SUPPORTED_DATABASE_VERSIONS:
        raise DatabaseFormatError(f"unknown database version: {version}")

def check_playlists(root: ET.Element) -> None:
    '''Raises DatabaseFormatError unless `root` is a Rhythmbox playlists document.'''
    if root.tag != constants.TAG_PLAYLISTS:
        raise DatabaseFormatError(f"unknown playlists format: root element '{root.tag}'")

def load_database(path: str) -> ET.Element:
    root = load_tree(path)
    check_database(root)
    return root

def load_playlists(path: str) -> ET.Element:
    root = load_tree(path)
    check_playlists(root)
    return root

# Entry access
def child_text(entry: ET.Element, tag: str) -> str | None:
    '''Returns the text of the first `tag` child, '' for an empty child, or None if there is no such child.'''
    child = entry.find(tag)
    if child is None:
        return None
    return child.text or ''

def append_child(parent: ET.Element, child: ET.Element) -> None:
    '''Appends `child` after the last child of `parent`, keeping the document layout.

    The new child takes over the tail of the previous last child, which in turn gets the
    indentation used before the first child (the text of `parent`).
    '''
    if len(parent) > 0:
        last = parent[-1]
        child.tail = last.tail
        last.tail = parent.text
    parent.append(child)

# Entry merging
def update_or_append_child(entry: ET.Element, tag: str, text: str, key: TrackKey) -> Overwrite | None:
    '''Sets the text of the `tag` child of `entry`, appending the child if it is missing.

    Replacing a different existing value is logged as a warning and returned, except for
    'first-seen' which is expected to be rewritten on every run.
    '''
    element = entry.find(tag)
    if element is None:
        element = ET.Element(tag)
        element.text = text
        append_child(entry, element)
        return None

    old = element.text or ''
    element.text = text
    if old == text:
        return None
    if tag == constants.TAG_FIRST_SEEN:
        logging.debug(f"updating {tag} of {key}: {old} -> {text}")
        return None
    logging.warning(f"overriding {tag} of {key}: {old}")
    return Overwrite(key=key, tag=tag, old=old, new=text)

def timestamp(value: datetime.datetime) -> str:
    '''Renders a datetime as integer epoch seconds.'''
    return str(int(value.timestamp()))

def merge_entry(entry: ET.Element, track: Track, key: TrackKey) -> list[Overwrite]:
    '''Copies the iTunes play history of `track` into the matched Rhythmbox `entry`.

    Args:
        entry: The matched song entry, updated in place.
        track: The iTunes track matched to the entry.
        key: Key of the track, used in log messages.

    Returns:
        The pre-existing values that were replaced.
    '''
    overwrites: list[Overwrite] = []

    def update(tag: str, text: str) -> None:
        overwrite = update_or_append_child(entry, tag, text, key)
        if overwrite:
            overwrites.append(overwrite)

    update(constants.TAG_FIRST_SEEN, timestamp(track.date_added))
    if track.play_date is not None:
        update(constants.TAG_LAST_PLAYED, timestamp(track.play_date))
    # a zero count carries no history, never let it replace one
    if track.play_count:
        update(constants.TAG_PLAY_COUNT, str(track.play_count))
    return overwrites
