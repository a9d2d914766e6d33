"""Sportsbook odds provider: event list, reference data, event detail."""
