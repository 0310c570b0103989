"""Batch ingestion of Nanion patch-clamp spreadsheet exports.

Reads activation / inactivation exports, detects the protocol and IV-group
layout from the header rows, and extracts the positional measurement table
of every file, many files at a time.
"""

__version__ = "0.1.0"
