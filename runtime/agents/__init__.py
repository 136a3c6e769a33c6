"""
Agents used by the gptcli runtime.

For now there is a single ConversationAgent that:

- receives a Session + new user message
- calls the remote API through the retry executor
- updates history (or rolls it back in no-context mode)
"""
