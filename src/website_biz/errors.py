"""Exception hierarchy for the website-biz pipeline.

Every error raised on purpose by the pipeline derives from
``WebsiteBizError``. The message of an exception is what ends up in a failed
job's ``error`` field, so messages are short machine-friendly tokens where
callers are expected to match on them.
"""


class WebsiteBizError(Exception):
    """Base exception for pipeline errors."""

    pass


class ConfigError(WebsiteBizError):
    """Raised when required configuration is missing or invalid."""

    pass


class StorageError(WebsiteBizError):
    """Raised when the local record store cannot be read or written."""

    pass


class InvalidPayloadError(WebsiteBizError):
    """Raised when a job payload lacks a field its stage needs."""

    pass


class LeadNotFoundError(WebsiteBizError):
    """Raised when a lead index does not exist in a leads file."""

    def __init__(self, message: str = "lead_not_found"):
        super().__init__(message)


class UnknownJobTypeError(WebsiteBizError):
    """Raised when a job carries a type no stage is registered for."""

    def __init__(self, job_type: str):
        super().__init__(f"unknown_job_type:{job_type}")
        self.job_type = job_type


class UnknownActionError(WebsiteBizError):
    """Raised when a synchronous action name is not recognized."""

    def __init__(self, action: str):
        super().__init__("unknown_action")
        self.action = action


class TemplateError(WebsiteBizError):
    """Raised when an email template operation cannot be applied."""

    pass


class MailTransportError(WebsiteBizError):
    """Raised when the mail transport fails as a whole."""

    pass


class MailAuthError(MailTransportError):
    """Raised when the mail transport rejects our credentials."""

    pass
