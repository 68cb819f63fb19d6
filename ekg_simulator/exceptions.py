"""Exception hierarchy for the EKG simulator."""


class EKGSimulatorError(Exception):
    """Base exception for all simulator errors."""


class InvalidHeartRateError(EKGSimulatorError, ValueError):
    """Raised when a heart rate would make the cycle length non-finite."""

    def __init__(self, heart_rate_bpm) -> None:
        self.heart_rate_bpm = heart_rate_bpm
        super().__init__(f"Heart rate must be a positive, finite number of beats per minute, got {heart_rate_bpm!r}")
