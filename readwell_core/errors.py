"""
Error types for readwell.

Pattern and settings errors are raised at startup or on explicit parse
requests. Per-node failures during tree walks are logged and skipped by the
components themselves and never surface through these types.
"""


class ReadwellError(Exception):
    """Base class for readwell errors"""
    pass


class PatternSyntaxError(ReadwellError):
    """A selector in a static rule list could not be compiled"""

    def __init__(self, selector: str, reason: str):
        self.selector = selector
        self.reason = reason
        super().__init__(f"Invalid pattern {selector!r}: {reason}")


class SettingsError(ReadwellError):
    """A settings record failed strict validation"""

    def __init__(self, field_name: str, value, reason: str = "invalid value"):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Setting {field_name!r}={value!r}: {reason}")


class CaptureError(ReadwellError):
    """Page capture through the browser failed"""
    pass
