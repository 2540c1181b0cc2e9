"""Shared fixtures for the cornerpoint test suite."""

import pytest


UNIT_CUBE_GRDECL = """\
-- Single 1x1x1 cell spanning the unit cube
SPECGRID
  1 1 1 1 F /

COORD
  0 0 0  0 0 1
  1 0 0  1 0 1
  0 1 0  0 1 1
  1 1 0  1 1 1
/

ZCORN
  0 0 0 0
  1 1 1 1
/

ACTNUM
  1 /
"""

TWO_BY_TWO_GRDECL = """\
SPECGRID
  2 2 2 1 F /

COORD
  0 0 0  0 0 2
  1 0 0  1 0 2
  2 0 0  2 0 2
  0 1 0  0 1 2
  1 1 0  1 1 2
  2 1 0  2 1 2
  0 2 0  0 2 2
  1 2 0  1 2 2
  2 2 0  2 2 2
/

ZCORN
  16*0 32*1 16*2
/

ACTNUM
  8*1 /
"""


@pytest.fixture
def unit_cube_text() -> str:
    """GRDECL text of a single unit-cube cell."""
    return UNIT_CUBE_GRDECL


@pytest.fixture
def two_by_two_text() -> str:
    """GRDECL text of a 2x2x2 grid of unit cells, all active."""
    return TWO_BY_TWO_GRDECL


@pytest.fixture
def grdecl_file(tmp_path, two_by_two_text):
    """The 2x2x2 grid written to a `.grdecl` file."""
    path = tmp_path / "box.grdecl"
    path.write_text(two_by_two_text, encoding="utf-8")
    return path

