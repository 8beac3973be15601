from launch_request import main


def test_ok(facade, capsys):
    assert main(["launchApp", '{"packageName": "com.notes"}'], facade=facade) == 0
    assert "[OK] result=true" in capsys.readouterr().out


def test_false_result_still_exits_zero(facade, capsys):
    assert main(["launchApp", '{"packageName": "com.absent"}'], facade=facade) == 0
    assert "[OK] result=false" in capsys.readouterr().out


def test_validation_error(facade, capsys):
    assert main(["launchApp"], facade=facade) == 1
    assert "INVALID_ARGUMENT: Package name is null" in capsys.readouterr().err


def test_unknown_method(facade):
    assert main(["nope", "{}"], facade=facade) == 2


def test_bad_json(facade):
    assert main(["launchApp", "{not json"], facade=facade) == 2
    assert main(["launchApp", "[1, 2]"], facade=facade) == 2


def test_no_arguments(facade):
    assert main([], facade=facade) == 2
