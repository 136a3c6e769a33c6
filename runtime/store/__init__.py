"""
Storage abstractions for the gptcli runtime.

Includes:
- TranscriptStore: Markdown snapshot of a Session
- HistoryStore: append-only prompt history
"""
