from classboard.core.exceptions import AppError, NotFoundError, ParseError, ValidationError


def test_not_found_error_structure():
    err = NotFoundError("Event", "e1")
    assert err.status_code == 404
    assert err.message == "Event with id e1 not found"
    assert err.details == {"resource_type": "Event", "resource_id": "e1"}
    assert isinstance(err, AppError)


def test_parse_error_structure():
    err = ParseError("25:00", expected="HH:MM time")
    assert err.status_code == 400
    assert "'25:00'" in err.message
    assert err.details["expected"] == "HH:MM time"


def test_validation_error_structure():
    err = ValidationError("Bad order", details={"foo": "bar"})
    assert err.status_code == 422
    assert err.details == {"foo": "bar"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}
    assert str(err) == "Generic error"
