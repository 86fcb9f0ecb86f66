"""Prompt templates stored as Markdown files."""
