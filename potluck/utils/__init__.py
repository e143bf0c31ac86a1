"""Utilities package for potluck-planner application."""
