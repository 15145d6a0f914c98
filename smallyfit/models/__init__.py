from smallyfit.models.food import FoodProfile, Nutrients, ServingUnit

__all__ = ["FoodProfile", "Nutrients", "ServingUnit"]
