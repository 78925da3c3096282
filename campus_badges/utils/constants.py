DEFAULT_RECENT_BADGES_LIMIT = 5

# Sort order used when listing a category; lower sorts first
RARITY_ORDER = {
    'common': 0,
    'uncommon': 1,
    'rare': 2,
    'epic': 3,
    'legendary': 4,
}

EMBED_FIELD_LIMIT = 900
