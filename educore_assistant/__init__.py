"""EduCore signup assistant: streaming chat client, decoder and gateway."""

__version__ = "0.1.0"
