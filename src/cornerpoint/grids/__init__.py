"""Corner-point geometry reconstruction and synthetic grid generation."""

from .vertices import *  # noqa
from .geometry import *  # noqa
from .cartesian import *  # noqa
