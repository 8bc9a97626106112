from speech_to_text_client.models import ErrorKind


class SpeechToTextError(Exception):
    """Base class for errors raised by this client. ``kind`` tags the failure."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NoCorporaError(SpeechToTextError):
    kind = ErrorKind.no_work_item


class PollTimeoutError(SpeechToTextError, TimeoutError):
    """Raised when the attempt budget runs out while the resource is still pending."""

    kind = ErrorKind.timeout


class TerminalFailureError(SpeechToTextError):
    kind = ErrorKind.terminal_failure


class UnexpectedStatusError(SpeechToTextError):
    kind = ErrorKind.unexpected_status


class TransportError(SpeechToTextError):
    kind = ErrorKind.transport


class RecognizeStreamError(TransportError):
    pass


class InvalidArgumentError(SpeechToTextError, ValueError):
    kind = ErrorKind.invalid_argument
