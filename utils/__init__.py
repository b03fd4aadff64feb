"""Text helpers shared by the bot and statistics code."""
