"""
*cornerpoint*

Eclipse GRDECL corner-point grid reading and hexahedral cell geometry reconstruction.
"""

from ._precision import *  # noqa
from .errors import *  # noqa
from .types import *  # noqa
from .config import *  # noqa
from .models import *  # noqa
from .stores import *  # noqa
from .grdecl import *  # noqa
from .grids import *  # noqa
from .loaders import *  # noqa
from .workspace import *  # noqa

__version__ = "0.1.0"
