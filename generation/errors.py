"""Failure conditions of the CV flow, each with a message a recruiter can act on."""


class CVServiceError(Exception):
    code = "error"
    status_code = 500
    default_message = "Something went wrong while processing the CV. Please try again."

    def __init__(self, message: str = None, *, user_message: str = None):
        super().__init__(message or self.default_message)
        self.user_message = user_message or self.default_message


class InputValidationError(CVServiceError):
    code = "validation"
    status_code = 400
    default_message = "Some required input is missing."

    def __init__(self, message: str = None, *, user_message: str = None):
        # validation messages are already written for the user
        super().__init__(message, user_message=user_message or message)


class UnsupportedFileError(InputValidationError):
    code = "unsupported_file"
    status_code = 415
    default_message = (
        "This file type is not supported. Upload a PDF or an image, "
        "or copy the text and paste it into the text box instead."
    )

    def __init__(self, message: str = None, *, user_message: str = None):
        super().__init__(message, user_message=user_message or self.default_message)


class EditError(CVServiceError):
    code = "edit"
    status_code = 422
    default_message = "That change could not be applied to the CV."

    def __init__(self, message: str = None, *, user_message: str = None):
        super().__init__(message, user_message=user_message or message)


class ConfigurationError(CVServiceError):
    code = "configuration"
    status_code = 503
    default_message = (
        "The AI service is not configured. Set GEMINI_API_KEY in the environment "
        "(or in a .env file next to app.py) and restart the service."
    )


class AuthenticationError(ConfigurationError):
    code = "authentication"
    default_message = (
        "The AI service rejected the API key. Check that GEMINI_API_KEY is valid "
        "and has access to the configured model."
    )


class TransportError(CVServiceError):
    code = "transport"
    status_code = 502
    default_message = (
        "Could not reach the AI service. Check the network connection and the API key, "
        "then try again."
    )


class ServiceTimeoutError(CVServiceError):
    code = "timeout"
    status_code = 504
    default_message = (
        "The AI service took too long to answer. Try a shorter CV or job description."
    )


class MalformedResponseError(CVServiceError):
    code = "malformed_response"
    status_code = 502
    default_message = (
        "The AI returned an incomplete result. Please submit again."
    )


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        CVServiceError,
        InputValidationError,
        UnsupportedFileError,
        EditError,
        ConfigurationError,
        AuthenticationError,
        TransportError,
        ServiceTimeoutError,
        MalformedResponseError,
    )
}


def describe_error(exc: Exception) -> str:
    """Human readable message for any failure reaching the top of the flow."""
    if isinstance(exc, CVServiceError):
        return exc.user_message
    return CVServiceError.default_message


def error_from_code(code: str, detail: str = None) -> CVServiceError:
    cls = ERRORS_BY_CODE.get(code, CVServiceError)
    return cls(detail, user_message=detail)
