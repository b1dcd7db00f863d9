"""Resource definitions: one entry per exposed collection."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ResourceDefinition:
    """Everything the route template needs to expose one collection.

    Attributes:
        path: URL segment the routes are mounted under (``/usermeals``)
        collection: local collection name in the store (``userMeals``)
        label: singular name used in docs and the OpenAPI tag (``userMeal``)
        edge: True for relation collections carrying ``_from``/``_to``
    """

    path: str
    collection: str
    label: str
    edge: bool = False

    @property
    def plural(self) -> str:
        return f"{self.label}s"


USERS = ResourceDefinition(path="users", collection="users", label="user")
MEALS = ResourceDefinition(path="meals", collection="meals", label="meal")
INGREDIENTS = ResourceDefinition(
    path="ingredients", collection="ingredients", label="ingredient"
)
USER_MEALS = ResourceDefinition(
    path="usermeals", collection="userMeals", label="userMeal", edge=True
)
MEAL_INGREDIENTS = ResourceDefinition(
    path="mealingredients",
    collection="mealIngredients",
    label="mealIngredient",
    edge=True,
)

RESOURCES: Tuple[ResourceDefinition, ...] = (
    USERS,
    MEALS,
    INGREDIENTS,
    USER_MEALS,
    MEAL_INGREDIENTS,
)
