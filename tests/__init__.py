"""Unit tests for the Phrase synchronization tool.

This package contains test modules for all components of the tool.
Tests use pytest with asyncio support and replace HTTP calls with fake transports and sessions.
"""
