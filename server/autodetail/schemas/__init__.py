"""Pydantic schemas for request/response validation."""

from .auth import *  # noqa: F403
from .booking import *  # noqa: F403
from .catalog import *  # noqa: F403
from .common import *  # noqa: F403
from .coupon import *  # noqa: F403
from .gallery import *  # noqa: F403
from .health import *  # noqa: F403
from .payment import *  # noqa: F403
from .quote import *  # noqa: F403
from .review import *  # noqa: F403
