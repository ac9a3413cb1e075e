"""Core domain package for botscope.

Core contains update ingestion, live monitoring, and statistics without any
HTTP, Bot API JSON, or UI-specific code, keeping the logic portable.
"""
