from __future__ import annotations

import pytest

from catan.log import configure_logging

from .builders import make_engine, make_play_engine

configure_logging("WARNING")


@pytest.fixture
def engine():
    """Partie à 4 joueurs en début de setup."""

    return make_engine(4)


@pytest.fixture
def play_engine():
    """Partie à 2 joueurs en sous-phase ACTIONS du joueur 0."""

    return make_play_engine(2)
