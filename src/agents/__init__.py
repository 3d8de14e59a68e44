"""
Agent implementations for ReadOrNot.

- Book Verifier: catalog lookup and title/author matching
- Review Analyzer: LLM verdict on whether a review reflects reading the book
"""
