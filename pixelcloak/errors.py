"""
Error taxonomy shared by the codecs, the crypto envelope and the cracker
"""


class CloakError(Exception):
    """Base class for every error raised by pixelcloak."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputMissing(CloakError):
    """A required field (message, password, key, carrier) was not supplied."""

    def __init__(self, field: str, message: str = None):
        super().__init__(message or f"No {field} provided.")
        self.field = field


class FormatError(CloakError):
    """Malformed hex, base64, binary or delimited payload."""


class CapacityExceeded(CloakError):
    """Payload larger than the carrier can hold."""


class MessageTooLong(CapacityExceeded):
    pass


class TerminatorNotFound(CloakError):
    pass


class EmptyPayload(CloakError):
    pass


class CorruptPayload(CloakError):
    """Extracted bits do not form valid UTF-8 or the expected structure."""


class AuthenticationFailure(CloakError):
    """Tag check failed. Deliberately never more specific than this."""

    def __init__(self, message: str = "Decryption failed: wrong password or corrupted data"):
        super().__init__(message)


class Cancelled(CloakError):
    """A long-running job was aborted. `job` holds the search job when there is one."""

    def __init__(self, message: str, job=None):
        super().__init__(message)
        self.job = job


class AttackTooLarge(CloakError):
    pass


class AttackNotFeasible(CloakError):
    pass
