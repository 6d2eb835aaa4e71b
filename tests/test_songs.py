import pytest

from script.parser import compile_script
from songs.library import SONGS, get_song, song_names

@pytest.mark.parametrize("name", sorted(SONGS))
def test_builtin_songs_compile(name):
    events = compile_script(get_song(name))
    assert events
    assert all(e.end_time > e.start_time for e in events)

def test_song_names_listed():
    assert "Twinkle Twinkle" in song_names()

def test_unknown_song():
    with pytest.raises(KeyError):
        get_song("Nope")
