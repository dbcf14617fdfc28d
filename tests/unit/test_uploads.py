from src.domain.uploads import check_upload
from src.rules.models import UploadsRules

RULES = UploadsRules(max_upload_bytes=10, allowlist_extensions=[".png", ".JPG"])


def test_empty_upload_rejected_even_without_rules():
    assert check_upload("a.png", b"", None) == "Uploaded file is empty"


def test_allowed_upload():
    assert check_upload("photo.PNG", b"12345", RULES) is None
    assert check_upload("photo.jpg", b"12345", RULES) is None


def test_extension_not_allowed():
    assert "not allowed" in check_upload("virus.exe", b"x", RULES)
    assert "not allowed" in check_upload("noext", b"x", RULES)


def test_too_large():
    assert "limit" in check_upload("big.png", b"x" * 11, RULES)
