"""Trivia domain services: rounds, answer judging, scoring and leaderboards.

This package holds the game logic that the webhook view and CLI commands
call into. Every component is stateless between requests; the redis store
passed in at construction is the only source of truth.
"""
