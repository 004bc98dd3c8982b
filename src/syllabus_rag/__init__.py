"""Retrieval-augmented question answering over a student's syllabi."""

__version__ = "1.0.0"
