from typing import Dict, List

# The closed set of categories the top-headlines listing understands.
# Anything else a user picks is a custom topic and goes through search.
NEWS_CATEGORIES: List[Dict[str, str]] = [
    {"id": "technology", "name": "Technology", "description": "Latest tech news, gadgets, and digital innovations"},
    {"id": "business", "name": "Business", "description": "Market trends, companies, and economic updates"},
    {"id": "science", "name": "Science", "description": "Scientific discoveries, research, and breakthroughs"},
    {"id": "health", "name": "Health", "description": "Medical advances, wellness, and healthcare policy"},
    {"id": "entertainment", "name": "Entertainment", "description": "Movies, music, celebrities, and pop culture"},
    {"id": "sports", "name": "Sports", "description": "Games, athletes, leagues, and sporting events"},
    {"id": "politics", "name": "Politics", "description": "Elections, policies, government, and international relations"},
    {"id": "environment", "name": "Environment", "description": "Climate change, conservation, and sustainability"},
    {"id": "finance", "name": "Finance", "description": "Personal finance, investing, and economic policy"},
    {"id": "general", "name": "General", "description": "Top headlines and breaking news"},
]

STANDARD_CATEGORIES = frozenset(c["id"] for c in NEWS_CATEGORIES)
DEFAULT_CATEGORY = "general"


def is_standard_category(category: str) -> bool:
    return category in STANDARD_CATEGORIES
