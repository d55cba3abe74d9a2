"""
Tests for classification observers.
"""
from dknn.classifier import classify
from dknn.points import ClassCenter, DataPoint, init_dilution_parameters
from dknn.trace import ConfidenceRecorder, console_observer


def _setup():
    params = [init_dilution_parameters(), init_dilution_parameters()]
    centers = [ClassCenter(0.0, 0.0), ClassCenter(10.0, 10.0)]
    return params, centers


def test_console_observer_output(capsys):
    """Test the console trace lists every class and the decision."""
    params, centers = _setup()
    classify(DataPoint(0.5, 0.5), params, centers, 2, observer=console_observer)

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "results for test data at [0.500000, 0.500000]:"
    assert lines[1] == "class 1 has confidence value of 1.000000"
    assert lines[2].startswith("class 2 has confidence value of ")
    assert lines[3] == "input data belongs to class 0\tconfidence: 1.000000"


def test_confidence_recorder_rows():
    """Test the recorder keeps one row per classification."""
    params, centers = _setup()
    rec = ConfidenceRecorder()
    classify(DataPoint(0.5, 0.5, 0), params, centers, 2, observer=rec)
    classify(DataPoint(10.0, 10.0), params, centers, 2, observer=rec)

    assert len(rec.rows) == 2
    assert rec.rows[0]["label"] == 0
    assert rec.rows[0]["predicted"] == 0
    assert rec.rows[0]["conf_0"] == 1.0
    assert rec.rows[1]["label"] == ""
    assert set(rec.rows[1]) == {"x", "y", "label", "predicted", "confidence", "conf_0", "conf_1"}

    rec.clear()
    assert rec.rows == []
