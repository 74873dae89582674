"""Apaddicto backend: authentication and user-progress engine."""
