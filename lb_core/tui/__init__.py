"""TUI package: the interaction core and its Textual host."""
