"""
Utility modules for ReadOrNot.

Cross-cutting concerns:
- Text: markup stripping and fuzzy matching
- Settings store: API credentials and provider choice
- Export: result and template workbooks
"""
