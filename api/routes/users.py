"""User routes"""

from api.routes.resources import build_resource_router
from domain.resources import USERS

router = build_resource_router(USERS)
