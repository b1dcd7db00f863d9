"""Meal-ingredient relation routes"""

from api.routes.resources import build_resource_router
from domain.resources import MEAL_INGREDIENTS

router = build_resource_router(MEAL_INGREDIENTS)
