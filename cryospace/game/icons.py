"""Narrative icons.

Plain emoji so chat clients render them without a custom font.
"""

# Rolls
ICON_DICE = "🎲"
ICON_TARGET = "🎯"
ICON_DAMAGE = "💥"
ICON_INITIATIVE = "⚡"
ICON_CRITICAL = "⭐"
ICON_FUMBLE = "💀"
ICON_HIT = "✅"
ICON_MISS = "❌"

# Actions
ICON_SWORD = "⚔️"
ICON_MAGIC = "✨"
ICON_SEARCH = "🔍"
ICON_MOVE = "🏃"
ICON_SHIELD = "🛡️"
ICON_TALK = "🤝"
ICON_NOTE = "📝"

# Status
ICON_SKULL = "💀"
ICON_HEART = "💚"
ICON_SUCCESS = "🟢"
ICON_FAILURE = "🔴"
