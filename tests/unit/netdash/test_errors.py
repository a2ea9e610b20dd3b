from netdash.errors import ErrorCode, NetDashError, ProcessError, ValidationError, handle_error


def test_to_dict():
    error = NetDashError(ErrorCode.DNS_TIMEOUT, "DNS query timed out", details={"host": "example.com"})
    assert error.to_dict() == {
        "code": "DNS_003",
        "message": "DNS query timed out",
        "details": {"host": "example.com"},
        "http_status": 504,
    }


def test_validation_error_defaults():
    error = ValidationError("bad host")
    assert error.code == ErrorCode.VALIDATION_INVALID
    assert error.http_status == 400


def test_process_error_kind():
    assert ProcessError(ErrorCode.PROCESS_NOT_FOUND, "x").kind == "NotFound"
    assert ProcessError(ErrorCode.PROCESS_PERMISSION_DENIED, "x").kind == "PermissionDenied"
    assert ProcessError(ErrorCode.PROCESS_TIMEOUT, "x").kind == "Timeout"
    assert ProcessError(ErrorCode.PROCESS_FAILED, "x").kind == "Failed"


def test_handle_error_wraps_foreign_exceptions():
    wrapped = handle_error(RuntimeError("boom"), "ping")
    assert wrapped.code == ErrorCode.SYSTEM_INTERNAL_ERROR
    assert wrapped.message == "ping: boom"
    assert wrapped.details["original_type"] == "RuntimeError"

    assert handle_error(PermissionError("nope")).code == ErrorCode.PROCESS_PERMISSION_DENIED

    original = ValidationError("bad")
    assert handle_error(original) is original
