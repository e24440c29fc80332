"""A UTF-8 text rope with gap-buffer leaves, for frequently edited text."""

__version__ = "0.1.0"