import os
import tempfile
import unittest
import xml.etree.ElementTree as ET
from unittest.mock import patch, MagicMock

from rbmigrate import matcher, rhythmdb, track_key
from rbmigrate.itunes import TrackId
from rbmigrate.matcher import DuplicateTrackError, UsageTracker
from rbmigrate.rhythmdb import DatabaseFormatError
from tests.fixtures import (RHYTHMDB_XML, UNKNOWN_ARTIST, DATE_ADDED_EPOCH, DATE_PLAYED, DATE_PLAYED_EPOCH,
                            create_track)

# Helpers
def _load_fixture() -> ET.Element:
    return ET.fromstring(RHYTHMDB_XML)

def _entry(root: ET.Element, location: str) -> ET.Element:
    for entry in root:
        if rhythmdb.child_text(entry, 'location') == location:
            return entry
    raise AssertionError(f"no entry at {location}")

# Test classes
class TestBuildTrackMap(unittest.TestCase):
    def test_success_distinct_keys(self) -> None:
        '''Tests that tracks differing in any key component are indexed separately.'''
        tracks = [
            create_track(1),
            create_track(2, track_number=2),
            create_track(3, disc_number=2),
            create_track(4, album=None),
            create_track(5, artist=None),
            create_track(6, name='Other'),
        ]
        actual = matcher.build_track_map(tracks)

        self.assertEqual(len(actual), len(tracks))
        for track in tracks:
            self.assertIs(actual[track_key.from_track(track)], track)

    def test_error_duplicate_key(self) -> None:
        '''Tests that two tracks sharing a key are rejected even if every other field differs.'''
        tracks = [create_track(1, play_count=1), create_track(2, play_count=9, play_date=DATE_PLAYED)]

        with self.assertRaises(DuplicateTrackError) as context:
            matcher.build_track_map(tracks)
        self.assertIn('Song / X / Y', str(context.exception))

class TestUsageTracker(unittest.TestCase):
    def test_success(self) -> None:
        first, second = create_track(1), create_track(2, track_number=2)
        usage = UsageTracker([first, second])

        usage.mark_used(first)
        self.assertTrue(usage.is_used(first))
        self.assertFalse(usage.is_used(second))
        self.assertEqual(usage.unused(), [second])

    def test_mark_twice(self) -> None:
        '''Tests that consuming a track a second time keeps it used.'''
        track = create_track(1)
        usage = UsageTracker([track])

        usage.mark_used(track)
        usage.mark_used(track)
        self.assertTrue(usage.is_used(track))
        self.assertEqual(usage.unused(), [])

class TestReadEntry(unittest.TestCase):
    def test_success(self) -> None:
        entry = _load_fixture()[0]
        key, location = matcher.read_entry(entry, UNKNOWN_ARTIST)

        self.assertEqual(key, track_key.from_track(create_track(1)))
        self.assertEqual(location, 'file:///music/a.mp3')

    def test_error_missing_title(self) -> None:
        entry = ET.fromstring('<entry type="song"><location>a</location></entry>')
        with self.assertRaises(DatabaseFormatError):
            matcher.read_entry(entry, UNKNOWN_ARTIST)

    def test_error_missing_location(self) -> None:
        entry = ET.fromstring('<entry type="song"><title>Song</title></entry>')
        with self.assertRaises(DatabaseFormatError):
            matcher.read_entry(entry, UNKNOWN_ARTIST)

    def test_error_malformed_number(self) -> None:
        entry = ET.fromstring('<entry type="song"><title>Song</title><track-number>one</track-number><location>a</location></entry>')
        with self.assertRaises(DatabaseFormatError):
            matcher.read_entry(entry, UNKNOWN_ARTIST)

class TestSyncEntries(unittest.TestCase):
    def setUp(self) -> None:
        self.track_a = create_track(1, track_number=1, play_count=5, play_date=DATE_PLAYED)
        self.track_b = create_track(2, track_number=2, play_count=0)
        self.track_map = matcher.build_track_map([self.track_a, self.track_b])

    def test_success_scenario(self) -> None:
        '''Tests that A gains its play count, B keeps its own, and both gain first-seen.'''
        root = _load_fixture()

        with self.assertLogs(level='WARNING'):
            result = matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)

        entry_a = _entry(root, 'file:///music/a.mp3')
        entry_b = _entry(root, 'file:///music/b.mp3')
        self.assertEqual(rhythmdb.child_text(entry_a, 'play-count'), '5')
        self.assertEqual(rhythmdb.child_text(entry_a, 'last-played'), DATE_PLAYED_EPOCH)
        self.assertEqual(rhythmdb.child_text(entry_a, 'first-seen'), DATE_ADDED_EPOCH)
        self.assertEqual(rhythmdb.child_text(entry_b, 'play-count'), '7')
        self.assertIsNone(entry_b.find('last-played'))
        self.assertEqual(rhythmdb.child_text(entry_b, 'first-seen'), DATE_ADDED_EPOCH)

        self.assertEqual(result.matched, 2)
        self.assertEqual(result.locations, {TrackId(1): 'file:///music/a.mp3', TrackId(2): 'file:///music/b.mp3'})
        self.assertEqual(result.unused, [])
        self.assertEqual(result.overwrites, [])

    def test_success_unmatched_entry_untouched(self) -> None:
        '''Tests that an entry without a match is left unmodified and reported once.'''
        root = _load_fixture()
        before = ET.tostring(_entry(root, 'file:///music/lonely.mp3'), encoding='unicode')

        with self.assertLogs(level='WARNING') as log_context:
            result = matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)

        after = ET.tostring(_entry(root, 'file:///music/lonely.mp3'), encoding='unicode')
        self.assertEqual(before, after)
        self.assertEqual([str(key) for key in result.unmatched], ['Lonely / Nobody / '])
        not_found = [line for line in log_context.output if 'not found' in line]
        self.assertEqual(len(not_found), 1)
        self.assertIn('Lonely / Nobody / ', not_found[0])

    def test_success_other_entry_types_untouched(self) -> None:
        '''Tests that non-song entries are skipped and not counted.'''
        root = _load_fixture()
        before = ET.tostring(root[3], encoding='unicode')

        with self.assertLogs(level='WARNING'):
            result = matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)

        self.assertEqual(ET.tostring(root[3], encoding='unicode'), before)
        self.assertEqual(len(result.unmatched), 1)

    def test_success_unused_tracks_reported(self) -> None:
        '''Tests that iTunes tracks without an entry are reported as unused.'''
        orphan = create_track(3, name='Orphan')
        track_map = matcher.build_track_map([self.track_a, self.track_b, orphan])

        with self.assertLogs(level='WARNING') as log_context:
            result = matcher.sync_entries(_load_fixture(), track_map, UNKNOWN_ARTIST)

        self.assertEqual(result.unused, [orphan])
        self.assertTrue(any('Orphan / X / Y unused' in line for line in log_context.output))
        self.assertNotIn(TrackId(3), result.locations)

    def test_success_unknown_artist(self) -> None:
        '''Tests that an entry with the unknown artist matches a track without artist.'''
        root = ET.fromstring(f'<rhythmdb version="2.0"><entry type="song"><title>Song</title>'
                             f'<artist>{UNKNOWN_ARTIST}</artist><location>a</location></entry></rhythmdb>')
        track = create_track(1, artist=None, album=None, disc_number=None, track_number=None)

        result = matcher.sync_entries(root, matcher.build_track_map([track]), UNKNOWN_ARTIST)

        self.assertEqual(result.matched, 1)
        self.assertEqual(result.locations, {TrackId(1): 'a'})

    def test_success_literal_unknown_artist_does_not_match(self) -> None:
        '''Tests that a track whose artist is literally the sentinel is not matched.'''
        root = ET.fromstring(f'<rhythmdb version="2.0"><entry type="song"><title>Song</title>'
                             f'<artist>{UNKNOWN_ARTIST}</artist><location>a</location></entry></rhythmdb>')
        track = create_track(1, artist=UNKNOWN_ARTIST, album=None, disc_number=None, track_number=None)

        with self.assertLogs(level='WARNING'):
            result = matcher.sync_entries(root, matcher.build_track_map([track]), UNKNOWN_ARTIST)

        self.assertEqual(result.matched, 0)
        self.assertEqual(result.unused, [track])

    def test_success_idempotent(self) -> None:
        '''Tests that a second run changes nothing and reports no overwrite.'''
        root = _load_fixture()
        with self.assertLogs(level='WARNING'):
            matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)
        first = ET.tostring(root, encoding='unicode')

        with self.assertLogs(level='WARNING') as log_context:
            result = matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)

        self.assertEqual(ET.tostring(root, encoding='unicode'), first)
        self.assertEqual(result.overwrites, [])
        self.assertFalse(any('overriding' in line for line in log_context.output))

    def test_success_overwrite_reported(self) -> None:
        '''Tests that replacing an existing play count is returned.'''
        track_b = create_track(2, track_number=2, play_count=9)
        track_map = matcher.build_track_map([self.track_a, track_b])

        with self.assertLogs(level='WARNING'):
            result = matcher.sync_entries(_load_fixture(), track_map, UNKNOWN_ARTIST)

        self.assertEqual([(o.tag, o.old, o.new) for o in result.overwrites], [('play-count', '7', '9')])

    def test_success_matched_twice(self) -> None:
        '''Tests that a track consumed by two entries keeps the first location and is reported.'''
        entry = '<entry type="song"><title>Song</title><location>{}</location></entry>'
        root = ET.fromstring(f'<rhythmdb version="2.0">{entry.format("first")}{entry.format("second")}</rhythmdb>')
        track = create_track(1, artist=None, album=None, disc_number=None, track_number=None)

        with self.assertLogs(level='WARNING') as log_context:
            result = matcher.sync_entries(root, matcher.build_track_map([track]), UNKNOWN_ARTIST)

        self.assertEqual(result.locations, {TrackId(1): 'first'})
        self.assertIn('more than one entry', log_context.output[0])

    def test_error_unknown_element(self) -> None:
        root = ET.fromstring('<rhythmdb version="2.0"><ignore/></rhythmdb>')
        with self.assertRaises(DatabaseFormatError):
            matcher.sync_entries(root, self.track_map, UNKNOWN_ARTIST)

class TestSyncDatabase(unittest.TestCase):
    def setUp(self) -> None:
        self.track_map = matcher.build_track_map([create_track(1, play_count=5)])

    def test_success_writes_file(self) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'rhythmdb.xml')
            with open(path, 'w', encoding='utf-8') as file:
                file.write(RHYTHMDB_XML)

            with self.assertLogs(level='INFO'):
                result = matcher.sync_database(path, self.track_map, UNKNOWN_ARTIST)

            root = rhythmdb.load_database(path)

        self.assertEqual(result.matched, 1)
        self.assertEqual(rhythmdb.child_text(_entry(root, 'file:///music/a.mp3'), 'play-count'), '5')

    @patch('rbmigrate.rhythmdb.write_root')
    def test_dry_run_skips_write(self, mock_write_root: MagicMock) -> None:
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'rhythmdb.xml')
            with open(path, 'w', encoding='utf-8') as file:
                file.write(RHYTHMDB_XML)

            with self.assertLogs(level='INFO') as log_context:
                matcher.sync_database(path, self.track_map, UNKNOWN_ARTIST, dry_run=True)

        mock_write_root.assert_not_called()
        self.assertTrue(any('[DRY-RUN]' in line for line in log_context.output))

    @patch('rbmigrate.rhythmdb.write_root')
    def test_error_nothing_written(self, mock_write_root: MagicMock) -> None:
        '''Tests that a failure during the pass leaves the file unwritten.'''
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'rhythmdb.xml')
            with open(path, 'w', encoding='utf-8') as file:
                file.write('<rhythmdb version="2.0"><entry type="song"><title>Song</title></entry></rhythmdb>')

            with self.assertLogs(level='INFO'):
                with self.assertRaises(DatabaseFormatError):
                    matcher.sync_database(path, self.track_map, UNKNOWN_ARTIST)

        mock_write_root.assert_not_called()
