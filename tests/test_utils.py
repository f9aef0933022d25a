from eclipsesim.utils import drift_to_display, time_to_display


def test_time_to_display_ranges():
    assert time_to_display(-1) == "N/A"
    assert time_to_display(0) == "0 sec"
    assert time_to_display(2 * 31557600) == "2.0 years"
    assert time_to_display(2 * 86400) == "2.0 days"
    assert time_to_display(7200) == "2.0 hrs"
    assert time_to_display(120) == "2.0 min"
    assert time_to_display(5) == "5.0 sec"


def test_drift_to_display():
    assert drift_to_display(0.0) == "+0.000e+00 %"
    assert drift_to_display(-1.25e-9) == "-1.250e-09 %"
