"""Potluck Planner - desktop sign-up board for potluck events."""
