"""Crawling, cataloguing and filtering of materials."""
