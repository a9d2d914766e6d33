"""Live match statistics provider (token authenticated)."""
