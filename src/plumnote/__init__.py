"""
plumnote: tagged personal notes with two-way sync.

A small note store that provides:
- One JSON document per installation
- Composable filters (id, kind, tags, date range, author)
- Push-pull replication between two installations over HTTP
"""

__version__ = "0.1.0"
