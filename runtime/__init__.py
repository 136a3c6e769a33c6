"""
Runtime package for the gptcli conversation flow.

This package contains:
- Agents (one user message -> retried remote round trip -> session update)
- Stores (Markdown transcripts, prompt history)
- Models (Session, Turn, OutputFormat)
"""
