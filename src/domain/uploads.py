import os

from src.rules.models import UploadsRules


def check_upload(filename: str, data: bytes, rules: UploadsRules | None) -> str | None:
    """Return an error message if the upload breaks the rules, else None."""
    if not data:
        return "Uploaded file is empty"
    if rules is None:
        return None

    ext = os.path.splitext(filename or "")[1].lower()
    allowed = [e.lower() for e in rules.allowlist_extensions]
    if ext not in allowed:
        return f"File type '{ext or filename}' is not allowed"
    if len(data) > rules.max_upload_bytes:
        return f"File exceeds the {rules.max_upload_bytes} byte upload limit"
    return None
