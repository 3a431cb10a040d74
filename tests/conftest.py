import os
import textwrap

import pytest

from ccagent.grid import ChipWorld

ENVS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "envs")


def parse(text: str, reveal: bool = True) -> ChipWorld:
    return ChipWorld.parse(textwrap.dedent(text), reveal=reveal)


@pytest.fixture
def envs_dir():
    return ENVS_DIR


@pytest.fixture
def open_world():
    # chip in the far corner, exit bottom-left
    return parse("""
        @..
        ...
        E.c
    """)


@pytest.fixture
def blue_door_world():
    return parse("""
        #########
        #@.b#..c#
        #...B..E#
        #########
    """)


@pytest.fixture
def exit_next_door_world():
    return parse("""
        #####
        #@E.#
        #####
    """)
