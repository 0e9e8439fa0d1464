'''Composite key used to match iTunes tracks to Rhythmbox entries.

The two programs share no identifier, so a song is identified by its
(name, artist, album, disc number, track number). Matching is exact: apart
from the unknown-artist fixup in `from_entry_fields` no value is normalized.
'''

from dataclasses import dataclass

from .itunes import Track

@dataclass(frozen=True)
class TrackKey:
    name: str
    artist: str | None
    album: str | None
    disc_number: int | None
    track_number: int | None

    def __str__(self) -> str:
        return f"{self.name} / {self.artist or ''} / {self.album or ''}"

def parse_number(text: str) -> int:
    '''Parses an unsigned decimal number, raising ValueError for anything else.'''
    if not text.isascii() or not text.isdigit():
        raise ValueError(f"invalid number: '{text}'")
    return int(text)

def from_track(track: Track) -> TrackKey:
    return TrackKey(
        name=track.name,
        artist=track.artist,
        album=track.album,
        disc_number=track.disc_number,
        track_number=track.track_number,
    )

def from_entry_fields(title: str,
                      artist: str | None,
                      album: str | None,
                      disc_number: str | None,
                      track_number: str | None,
                      unknown_artist: str) -> TrackKey:
    '''Builds the key of a Rhythmbox entry from the text of its children.

    Args:
        title: Text of the 'title' child.
        artist: Text of the 'artist' child, if present.
        album: Text of the 'album' child, if present.
        disc_number: Text of the 'disc-number' child, if present.
        track_number: Text of the 'track-number' child, if present.
        unknown_artist: The artist Rhythmbox stores for songs without one. iTunes leaves
            the artist out instead, so this value is treated as no artist.

    Raises:
        ValueError: A number field is not an unsigned decimal number.
    '''
    if artist == unknown_artist:
        artist = None
    return TrackKey(
        name=title,
        artist=artist,
        album=album,
        disc_number=parse_number(disc_number) if disc_number is not None else None,
        track_number=parse_number(track_number) if track_number is not None else None,
    )
