"""Eclipse GRDECL text format: tokenizing, reading and writing."""

from .tokens import *  # noqa
from .reader import *  # noqa
from .writer import *  # noqa
