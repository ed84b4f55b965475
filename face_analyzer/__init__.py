"""
Face Analyzer recommendation service.

Detects aesthetic features in a face photo with an LLM, matches them against
the treatment catalog with a deterministic keyword scorer, and asks the LLM to
explain the shortlist.
"""
