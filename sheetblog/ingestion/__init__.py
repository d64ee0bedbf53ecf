"""
SheetBlog Ingestion Module
==========================

CSV source fetching and post normalization.

This module handles:
- Remote and local CSV retrieval with timeouts
- Row decoding into typed posts with per-field defaults
- Sentinel error posts for malformed rows
"""
