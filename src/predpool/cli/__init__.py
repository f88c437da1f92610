"""Typer CLI."""
