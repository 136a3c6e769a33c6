"""
Pydantic datamodels used by the gptcli runtime.

- session_models: Session + Turn + OutputFormat
"""
