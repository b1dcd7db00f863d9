"""User-meal relation routes"""

from api.routes.resources import build_resource_router
from domain.resources import USER_MEALS

router = build_resource_router(USER_MEALS)
