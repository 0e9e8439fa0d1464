'''
# Summary
Migrates play history and static playlists from an iTunes library export into Rhythmbox.

    - first-seen:   Set from the iTunes date added for every matched song.
    - last-played:  Set from the iTunes play date, when the track was played.
    - play-count:   Set from the iTunes play count, when it is above zero.
    - playlists:    Static iTunes playlists are appended to the Rhythmbox playlists. Smart playlists are skipped.

Songs are matched by name, artist, album, disc number and track number. Both Rhythmbox files
are copied to a '.bak' sibling before anything is changed, and the run refuses to start if
either backup already exists.

# Assumptions
* Rhythmbox is not running while the migration runs.
* The iTunes library is authoritative for the fields it provides.
'''

import argparse
import logging
import os
import shutil
import sys
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from . import common
from . import config
from . import constants
from . import itunes
from . import matcher
from . import playlists
from .matcher import SyncResult
from .playlists import PlaylistMigrationResult

class MigrationError(RuntimeError):
    '''Raised when a phase of the migration fails. The cause is chained.'''

class BackupExistsError(FileExistsError):
    '''Raised when a backup of a Rhythmbox file already exists.'''

# CLI support
class Namespace(argparse.Namespace):
    '''Command-line arguments for migrate module.'''

    # Required
    itunes_library: str

    # Optional (alphabetical)
    dry_run: bool
    quiet: bool
    rhythmbox_path: str | None
    unknown_artist: str

@dataclass
class MigrationResult:
    '''Complete results from a migration run.'''
    sync: SyncResult
    playlists: PlaylistMigrationResult

def parse_args(argv: list[str]) -> Namespace:
    '''Parse command line arguments.

    Args:
        argv: Argument list without the program name
    '''
    parser = argparse.ArgumentParser(description='Migrate play history and playlists from an iTunes library to Rhythmbox.')

    # Required
    parser.add_argument('itunes_library', type=str,
                       help='Path to the iTunes Library XML file')

    # Optional (alphabetical)
    parser.add_argument('--dry-run', '-d', action='store_true',
                       help='Match and merge in memory only. No backup is made and no file is written.')
    parser.add_argument('--quiet', '-q', action='store_true',
                       help='Silence all console output. The log file is still written.')
    parser.add_argument('--rhythmbox-path', '-r', type=str,
                       help='Path to the Rhythmbox data directory. '
                            'Default: $XDG_DATA_HOME/rhythmbox or ~/.local/share/rhythmbox')
    parser.add_argument('--unknown-artist', type=str, default=config.UNKNOWN_ARTIST,
                       help=f"Artist value Rhythmbox uses for songs without one. Default: '{config.UNKNOWN_ARTIST}'")

    args = parser.parse_args(argv, namespace=Namespace())

    # Normalize paths (only if not None)
    common.normalize_arg_paths(args, ['itunes_library', 'rhythmbox_path'])

    return args

@contextmanager
def phase(action: str) -> Iterator[None]:
    '''Re-raises any failure inside the block as a MigrationError naming `action`.'''
    try:
        yield
    except MigrationError:
        raise
    except Exception as e:
        raise MigrationError(f"failed to {action}") from e

def existing_backups(rhythmbox_path: str) -> list[str]:
    '''Returns the '.bak' files already present in `rhythmbox_path`. Any of them blocks a run.'''
    paths = [os.path.join(rhythmbox_path, name)
             for name in (constants.RHYTHMDB_BACKUP_FILENAME, constants.PLAYLISTS_BACKUP_FILENAME)]
    return [path for path in paths if os.path.exists(path)]

def backup_rhythmbox_files(rhythmbox_path: str, dry_run: bool = False) -> tuple[str, str]:
    '''Copies 'rhythmdb.xml' and 'playlists.xml' to their '.bak' siblings.

    Both backup paths are checked before anything is copied.

    Returns:
        Paths of the database and playlists files.

    Raises:
        BackupExistsError: A backup already exists.
    '''
    logging.info('Backing up existing Rhythmbox files...')
    rhythmdb_path  = os.path.join(rhythmbox_path, constants.RHYTHMDB_FILENAME)
    rhythmdb_bak   = os.path.join(rhythmbox_path, constants.RHYTHMDB_BACKUP_FILENAME)
    playlists_path = os.path.join(rhythmbox_path, constants.PLAYLISTS_FILENAME)
    playlists_bak  = os.path.join(rhythmbox_path, constants.PLAYLISTS_BACKUP_FILENAME)

    existing = existing_backups(rhythmbox_path)
    if existing:
        raise BackupExistsError(f"backup already exists: {', '.join(existing)}")

    for source, backup in ((rhythmdb_path, rhythmdb_bak), (playlists_path, playlists_bak)):
        if dry_run:
            common.log_dry_run('copy', f"{source} -> {backup}")
        else:
            shutil.copy2(source, backup)
            logging.debug(f"copied '{source}' to '{backup}'")
    return rhythmdb_path, playlists_path

def run_migration(itunes_library_path: str,
                  rhythmbox_path: str,
                  unknown_artist: str = config.UNKNOWN_ARTIST,
                  dry_run: bool = False) -> MigrationResult:
    '''Runs the full migration: read the iTunes library, back up the Rhythmbox files,
    synchronize the database, then migrate the playlists.

    Args:
        itunes_library_path: Path to the iTunes Library XML file.
        rhythmbox_path: Path to the Rhythmbox data directory.
        unknown_artist: Artist value Rhythmbox uses for songs without one.
        dry_run: If True, skip the backup and all writes.

    Raises:
        MigrationError: A phase failed. Files of later phases are left untouched.
    '''
    logging.info(f"Rhythmbox path: {rhythmbox_path}")

    with phase('read iTunes library'):
        logging.info('Reading iTunes library...')
        library = itunes.strip_movies(itunes.load_library(itunes_library_path))
        track_map = matcher.build_track_map(list(library.tracks.values()))

    with phase('backup Rhythmbox files'):
        rhythmdb_path, playlists_path = backup_rhythmbox_files(rhythmbox_path, dry_run=dry_run)

    with phase('synchronize to Rhythmbox database'):
        sync_result = matcher.sync_database(rhythmdb_path, track_map, unknown_artist, dry_run=dry_run)

    with phase('migrate playlists'):
        playlist_result = playlists.migrate_playlists_file(playlists_path, library.playlists, sync_result.locations, dry_run=dry_run)

    return MigrationResult(sync=sync_result, playlists=playlist_result)

def format_error(error: BaseException) -> str:
    '''Joins the messages of an exception and its chained causes.'''
    messages = []
    current: BaseException | None = error
    while current is not None:
        messages.append(str(current) or type(current).__name__)
        current = current.__cause__
    return ': '.join(messages)

def main(argv: list[str]) -> int:
    script_args = parse_args(argv[1:])
    common.configure_log_module(__file__, level=logging.DEBUG, console=not script_args.quiet)

    rhythmbox_path = script_args.rhythmbox_path or str(config.default_rhythmbox_path())
    try:
        result = run_migration(script_args.itunes_library,
                               rhythmbox_path,
                               unknown_artist=script_args.unknown_artist,
                               dry_run=script_args.dry_run)
    except MigrationError as e:
        logging.error(format_error(e))
        logging.debug('migration failed', exc_info=True)
        return 1

    resolved = sum(p.resolved for p in result.playlists.playlists)
    logging.info(f"Summary: {result.sync.matched} songs updated, {len(result.sync.unmatched)} not found, "
                 f"{len(result.sync.unused)} unused, {len(result.sync.overwrites)} values overridden, "
                 f"{len(result.playlists.playlists)} playlists with {resolved} items migrated")
    return 0

def cli() -> None:
    sys.exit(main(sys.argv))

# Main
if __name__ == '__main__':
    cli()
