"""Ingredient routes"""

from api.routes.resources import build_resource_router
from domain.resources import INGREDIENTS

router = build_resource_router(INGREDIENTS)
