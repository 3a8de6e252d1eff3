"""Prompt templates for JSON and program translation."""
