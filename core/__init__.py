"""
Core building blocks of gptcli that know nothing about sessions or the
terminal:

- api: OpenAI client wrapper and request models
- retry: RetryPolicy, backoff scheduler and retry executor
- stream: streaming response accumulator
"""
