"""Grok Trends story curation pipeline."""
