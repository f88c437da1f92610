"""Scripted lifecycle runs."""
