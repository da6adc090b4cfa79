"""Tabular and file exports of a solved routine."""
