import pytest

from imageupload.utils.filenames import sanitize_file_name


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("photo.png", "photo.png"),
        ("my holiday  photo.jpg", "my_holiday_photo.jpg"),
        ('bad<>:"|?*name.png', "bad_name.png"),
        ("tab\there.gif", "tab_here.gif"),
        ("__leading and trailing__", "leading_and_trailing"),
        (".env", "file_env"),
        ("../../etc/passwd", "file_._.._etc_passwd"),
        ("dir\\file.webp", "dir_file.webp"),
        ("", "unnamed_file"),
        ("   ", "unnamed_file"),
        ("???", "unnamed_file"),
    ],
)
def test_sanitize_file_name(raw, expected):
    assert sanitize_file_name(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "photo.png",
        ".",
        "._a",
        "..",
        " . x ",
        "a\x00b\x1fc",
        "_._._",
        "CON.png",
        "ünïcödé name.png",
        "../../etc/passwd",
    ],
)
def test_sanitize_is_idempotent(raw):
    once = sanitize_file_name(raw)
    assert sanitize_file_name(once) == once


def test_sanitized_name_has_no_separators_or_leading_dot():
    result = sanitize_file_name("./../..\\evil name?.png")
    assert "/" not in result
    assert "\\" not in result
    assert not result.startswith(".")
