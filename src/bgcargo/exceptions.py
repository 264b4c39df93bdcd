# src/bgcargo/exceptions.py


class ArgoToolkitError(Exception):
    pass


class ParseError(ArgoToolkitError):
    """Malformed row in an index listing."""

    def __init__(self, message: str, line_number: int = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class UnknownFloatError(ArgoToolkitError, KeyError):
    def __init__(self, wmoid: int):
        self.wmoid = wmoid
        super().__init__(f"Float {wmoid} is not listed in the index")

    def __str__(self):
        return self.args[0]


class FetchError(ArgoToolkitError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Could not fetch {url}: {reason}")


class ShapeMismatchError(ArgoToolkitError, ValueError):
    pass
