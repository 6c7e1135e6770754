import pytest

from gtctl.versions import compare


@pytest.mark.parametrize(
    "v1,v2,want",
    [
        ("v0.3.2", "v0.4.0-nightly-20230802", False),
        ("v0.4.0-nightly-20230807", "0.4.0-nightly-20230802", True),
    ],
)
def test_compare(v1, v2, want):
    assert compare(v1, v2) is want


def test_compare_equal_is_not_greater():
    assert compare("v1.2.3", "1.2.3") is False


def test_compare_partial_version():
    assert compare("1.2", "1.1.9") is True


def test_compare_is_antisymmetric():
    assert compare("v0.4.0", "v0.4.0-nightly-20230802") is True
    assert compare("v0.4.0-nightly-20230802", "v0.4.0") is False


@pytest.mark.parametrize("bad", ["", "not-a-version", "1.2.3.4"])
def test_compare_invalid(bad):
    with pytest.raises(ValueError):
        compare(bad, "1.0.0")
    with pytest.raises(ValueError):
        compare("1.0.0", bad)