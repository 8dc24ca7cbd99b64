# services/quiz_service/names.py
"""Suggested player names such as ``KlugeEule42``."""

import random

ADJECTIVES = [
    "Schnelle", "Kluge", "Mutige", "Lustige", "Starke", "Kreative", "Coole",
    "Wilde", "Clevere", "Geniale", "Magische", "Legendäre", "Epische", "Ninja",
    "Mystische", "Goldene", "Silberne", "Fliegende", "Tanzende", "Singende",
]

NOUNS = [
    "Fuchs", "Adler", "Tiger", "Panda", "Delfin", "Löwe", "Wolf", "Bär",
    "Drache", "Phönix", "Einhorn", "Falke", "Gepard", "Hai", "Panther",
    "Affe", "Eule", "Rabe", "Salamander", "Kobra",
]


def random_player_name(rng=None) -> str:
    rng = rng or random
    return f"{rng.choice(ADJECTIVES)}{rng.choice(NOUNS)}{rng.randint(1, 99)}"
