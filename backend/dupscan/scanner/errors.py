from __future__ import annotations


class ScanError(Exception):
    def __init__(self, message: str, code: str) -> None:
        super().__init__(message)
        self.code = code


class OutputUnavailableError(ScanError):
    pass


class WalkError(ScanError):
    def __init__(self, message: str, code: str, path: str | None = None) -> None:
        super().__init__(message, code)
        self.path = path


class HashError(ScanError):
    pass


class ConfigError(ScanError):
    pass
