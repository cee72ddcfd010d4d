"""Webcomic publishing backend."""
