"""Question answering over indexed news."""
