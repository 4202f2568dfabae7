from __future__ import annotations


class KargoTakipError(Exception):
    pass


class ConfigurationError(KargoTakipError):
    pass


class ProviderCloseError(KargoTakipError):
    """Raised after every provider teardown ran and at least one failed."""

    def __init__(self, errors: list[tuple[str, BaseException]]):
        self.errors = errors
        names = ", ".join(name for name, _ in errors)
        super().__init__(f"Failed to close provider(s): {names}")
