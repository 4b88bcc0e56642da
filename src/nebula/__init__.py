"""Nebula - tasks and calendar planner."""
