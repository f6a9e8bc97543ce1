"""contentq — idea-to-publication content lifecycle and publishing queue."""

__version__ = "0.1.0"
