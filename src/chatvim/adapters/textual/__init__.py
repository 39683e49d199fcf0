"""Textual front end for the chat engine."""

from .controller import TextualChatAdapter, TextualUIHooks, chord_from_textual, status_line

__all__ = ["TextualChatAdapter", "TextualUIHooks", "chord_from_textual", "status_line"]
