"""Best-effort store section guess for shopping list items."""

from typing import Optional, Sequence, Tuple

from core.utils.helpers import normalize_name

# Order matters; the first section with a matching keyword wins.
CATEGORY_KEYWORDS: Sequence[Tuple[str, Tuple[str, ...]]] = (
    ("Produce", (
        "apple", "banana", "tomato", "cucumber", "lettuce", "carrot", "onion", "garlic",
        "pepper", "spinach", "potato", "avocado", "lemon", "lime", "orange", "berry",
    )),
    ("Dairy", ("milk", "yogurt", "cheese", "feta", "mozzarella", "butter", "cream", "egg")),
    ("Bakery", ("bread", "bun", "baguette", "roll", "tortilla", "pita")),
    ("Meat & Fish", (
        "chicken", "beef", "pork", "turkey", "ham", "salmon", "tuna", "shrimp", "sausage",
        "bacon",
    )),
    ("Pantry", (
        "flour", "sugar", "salt", "rice", "pasta", "noodle", "bean", "lentil", "canned",
        "tomato paste", "tomato sauce", "oil", "vinegar", "mustard", "ketchup", "honey",
    )),
    ("Spices", (
        "cumin", "paprika", "oregano", "basil", "thyme", "coriander", "curry", "chili",
        "turmeric", "peppercorn", "spice",
    )),
    ("Frozen", ("frozen", "ice cream")),
    ("Beverages", ("coffee", "tea", "juice", "soda", "water", "sparkling")),
    ("Household", (
        "paper", "towel", "foil", "wrap", "detergent", "soap", "shampoo", "bag", "trash",
    )),
)


def guess_category(name: str) -> Optional[str]:
    """Substring match against CATEGORY_KEYWORDS; None when nothing matches."""
    needle = normalize_name(name or "")
    if not needle:
        return None
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in needle for keyword in keywords):
            return category
    return None
