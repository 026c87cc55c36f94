"""CLI layer for reelcost application."""
