"""Services package - Business logic layer"""

from services.shopping_service import ShoppingService
from services.normalization_service import NormalizationService
from services.macro_service import MacroService

# Note: parser, formatter, key and reconciliation modules contain plain functions, not classes

__all__ = [
    "ShoppingService",
    "NormalizationService",
    "MacroService",
]
