"""Static content: dream categories, suggestions, quotes and monthly Dream Drops."""

from datetime import date
from typing import Dict, List, get_args

from shegoes.models.user_state import Category

CATEGORIES: List[str] = list(get_args(Category))

SUGGESTED_DREAMS: Dict[str, List[str]] = {
    "Travel": ["Solo trip to Italy", "Move to a new city", "First business class flight", "Bucket list safari"],
    "Career & Money": ["Negotiate my salary", "Start a side hustle", "Save my first $10k", "Launch a personal brand"],
    "Confidence": ["Speak at a conference", "Master a new skill", "Say \"no\" more often", "Wear what makes me feel bold"],
    "Lifestyle Upgrade": ["Design my dream home", "Host a luxury dinner party", "Join a private club", "Prioritize daily rest"],
}

QUOTES: List[str] = [
    "You've got this, sis.",
    "Your dream is valid. Let's move towards it.",
    "Permission granted. Now, let's take one step.",
    "Growth happens in the small moments.",
    "Worldly, wealthy, and well-rested. That's the vibe.",
]

MONTHLY_DREAM_DROPS: List[Dict[str, str]] = [
    {
        "id": "dd-1",
        "title": "The Wealthy Woman Audit",
        "description": "Look at your bank statement. Not with shame, but with curiosity. Where is your money going? Does it serve your dream?",
        "category": "Career & Money",
    },
    {
        "id": "dd-2",
        "title": "The Solo Date Challenge",
        "description": "Take yourself out. No phone, just you and your thoughts. Practice being your own best company.",
        "category": "Confidence",
    },
    {
        "id": "dd-3",
        "title": "The Passport Refresh",
        "description": "Check your expiration date. Even if you don't have a trip booked yet, verify your status. Readiness is half the battle.",
        "category": "Travel",
    },
]


def catalog() -> List[Dict[str, object]]:
    return [{"name": name, "suggestions": SUGGESTED_DREAMS[name]} for name in CATEGORIES]


def quote_for_day(day: date) -> str:
    return QUOTES[day.toordinal() % len(QUOTES)]


def featured_drop(day: date) -> Dict[str, str]:
    """The Dream Drop featured for ``day``'s month (rotates through the list)."""
    index = (day.year * 12 + day.month - 1) % len(MONTHLY_DREAM_DROPS)
    return MONTHLY_DREAM_DROPS[index]
