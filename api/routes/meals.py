"""Meal routes"""

from api.routes.resources import build_resource_router
from domain.resources import MEALS

router = build_resource_router(MEALS)
