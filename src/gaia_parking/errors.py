"""Exception hierarchy shared by the detection service."""


class GaiaParkingError(Exception):
    """Base class for all service errors."""


class ConfigurationError(GaiaParkingError):
    """A server-side asset or configuration is missing or unreadable."""


class CameraConfigError(ConfigurationError):
    """The camera configuration document could not be loaded."""


class ReferenceImageError(ConfigurationError):
    """The reference map image is missing or cannot be decoded."""


class ParkingMapError(ConfigurationError):
    """The parking map geometry document could not be loaded."""


class ClientInputError(GaiaParkingError):
    """The request itself is invalid."""


class UnknownCameraError(ClientInputError):
    """The requested camera key is not configured."""

    def __init__(self, camera_key: str):
        super().__init__(f"Unknown camera '{camera_key}'")
        self.camera_key = camera_key


class InferenceError(GaiaParkingError):
    """The external inference service failed or could not be reached."""


class MissingCredentialError(InferenceError):
    """No API credential is configured for the inference service."""
