"""
mealplanner: recipe data & aggregation engine.

Searches the Spoonacular recipe catalog, keeps saved recipes and weekly
meal plans in a local store, and builds merged grocery lists from a plan.
"""

__version__ = "0.1.0"
