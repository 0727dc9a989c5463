"""
News RAG

Ingests news articles, turns their text into searchable vectors, and answers
free-form questions from the most relevant fragments using a generative model.
"""

__version__ = "0.1.0"
