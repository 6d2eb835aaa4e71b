# songs/library.py
from typing import Dict, List

SONGS: Dict[str, str] = {
    "Scale": "\n".join(["step 1/8", "C", "D", "E", "F", "G", "A", "B", "octave 5", "C"]),
    "Twinkle Twinkle": """\
step 1/4
C
C
G
G
A
A
step 1/2
G
step 1/4
F
F
E
E
D
D
step 1/2
C
""",
    "Ode to Joy": """\
step 1/4
E
E
F
G
G
F
E
D
C
C
D
E
step 3/8
E
step 1/8
D
step 1/2
D
""",
    "Mary Had a Little Lamb": """\
step 1/4
E
D
C
D
E
E
step 1/2
E
step 1/4
D
D
step 1/2
D
step 1/4
E
G
step 1/2
G
""",
    "Frere Jacques": """\
step 1/4
C
D
E
C
C
D
E
C
E
F
step 1/2
G
step 1/4
E
F
step 1/2
G
""",
}

def song_names() -> List[str]:
    return list(SONGS)

def get_song(name: str) -> str:
    try:
        return SONGS[name]
    except KeyError:
        raise KeyError(f"Unknown song: {name}") from None
