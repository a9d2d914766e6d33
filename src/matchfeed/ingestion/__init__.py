"""Upstream providers: sportsbook, statistics, live stats."""
