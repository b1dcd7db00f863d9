"""API routes package"""

from . import users, meals, ingredients, usermeals, mealingredients, health

__all__ = ["users", "meals", "ingredients", "usermeals", "mealingredients", "health"]
