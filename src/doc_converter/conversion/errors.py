class ServiceError(Exception):
    """Base class for failures surfaced to the HTTP caller.

    Each subclass carries the HTTP status and a short machine-readable code;
    the message is the human-readable cause.
    """

    status_code = 500
    code = "internal_error"

    @property
    def message(self) -> str:
        return str(self)

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500


class MissingParameter(ServiceError):
    status_code = 400
    code = "missing_parameter"


class UnsupportedFormat(ServiceError):
    status_code = 415
    code = "unsupported_format"


class MalformedUpload(ServiceError):
    status_code = 400
    code = "malformed_upload"


class NoFileFound(ServiceError):
    status_code = 400
    code = "no_file_found"


class UploadTooLarge(ServiceError):
    status_code = 413
    code = "payload_too_large"


class UploadWriteFailed(ServiceError):
    code = "upload_write_failed"


class ConversionFailed(ServiceError):
    code = "conversion_failed"


class TempFileError(ServiceError):
    code = "temp_file_error"
