"""
PSI error taxonomy.

Every failure a protocol run can hit derives from PSIError so callers can
tell "no intersection possible" apart from "the protocol failed". None of
these are ever coerced into a zero score.
"""


class PSIError(Exception):
    """Base class for every protocol-level failure."""

    code: str = "PSI_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.code, "message": self.message}


class EmptyInputError(PSIError):
    """No markers supplied, so there is nothing to intersect. Not retried."""

    code = "EMPTY_INPUT"


class DiseaseNotFoundError(PSIError):
    """The disease id does not resolve to a registered marker set."""

    code = "DISEASE_NOT_FOUND"

    def __init__(self, disease_id: str) -> None:
        super().__init__(f"Disease not found: {disease_id}")
        self.disease_id = disease_id


class RandomSourceUnavailableError(PSIError):
    """The OS CSPRNG could not be read. Fatal; never replaced by a weaker source."""

    code = "RANDOM_SOURCE_UNAVAILABLE"


class NetworkError(PSIError):
    """The single request/response exchange with the hospital backend failed."""

    code = "NETWORK_ERROR"


class CalibrationUnavailableError(PSIError):
    """The per-disease calibration constant could not be retrieved."""

    code = "CALIBRATION_UNAVAILABLE"


class InvalidBlindedElementError(PSIError):
    """A wire value is not a decimal integer in [0, P)."""

    code = "INVALID_BLINDED_ELEMENT"


class ProtocolStateError(PSIError):
    """A run was driven out of order, e.g. finalized twice."""

    code = "PROTOCOL_STATE"


class InvalidCalibrationConstantError(ValueError):
    """Raised by the registry when a constant outside (0, 100] is set."""
