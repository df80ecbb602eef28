from __future__ import annotations

from .artifacts import mount_artifacts_api
from .gallery import mount_gallery_api
from .portfolios import mount_portfolios_api
from .sessions import mount_sessions_api
from .users import mount_users_api

__all__ = [
    "mount_artifacts_api",
    "mount_gallery_api",
    "mount_portfolios_api",
    "mount_sessions_api",
    "mount_users_api",
]
