"""Outcome-dependency registry."""
