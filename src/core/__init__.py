"""Core module for configuration, exceptions, logging and tracing.

- Pydantic Settings with SettingsConfigDict
- Custom namespaced exceptions rooted at SarthiServiceError
"""
