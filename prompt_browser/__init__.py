"""Prompt Browser - search, view and copy reusable prompts."""
