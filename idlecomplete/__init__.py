"""Idle-driven auto-completion for prompt_toolkit prompts."""

__version__ = "0.1.0"
