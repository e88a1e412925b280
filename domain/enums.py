"""
Domain enums for Mise.
Contains all enumeration types used across the domain models.
"""

import enum


class CanonicalUnit(str, enum.Enum):
    """The only measurement units the engine stores or merges on"""

    G = "g"
    KG = "kg"
    ML = "ml"
    L = "L"
    TSP = "tsp"
    TBSP = "tbsp"


class MacroBasis(str, enum.Enum):
    """What amount of food a macro estimate refers to"""

    PER_SERVING = "per_serving"
    PER_RECIPE = "per_recipe"
