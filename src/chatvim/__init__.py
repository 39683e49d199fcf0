"""Modal, script-configured chat client core."""

__all__ = [
    "actions",
    "adapters",
    "buffer",
    "chat",
    "core",
    "keymaps",
    "modes",
    "runtime",
    "scripting",
]

__version__ = "0.1.0"
