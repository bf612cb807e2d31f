"""
Custom Exception Classes for prompt-config

Hierarchical exception structure shared by the store, sync and settings layers.
"""


class PromptConfigError(Exception):
    """Base exception for all prompt-config errors"""

    def __init__(self, message: str, recoverable: bool = True):
        self.message = message
        self.recoverable = recoverable
        super().__init__(message)


class ConfigError(PromptConfigError):
    """Settings file or environment errors"""

    def __init__(self, message: str, recoverable: bool = False):
        super().__init__(f"Config Error: {message}", recoverable)


class StoreError(PromptConfigError):
    """Persistent store read/write errors"""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(f"Store Error: {message}", recoverable=True)


class FetchError(PromptConfigError):
    """Remote config fetch errors"""

    def __init__(
        self,
        message: str,
        reason: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        self.reason = reason
        self.url = url
        self.status_code = status_code
        super().__init__(f"Fetch Error: {message}", recoverable=True)
