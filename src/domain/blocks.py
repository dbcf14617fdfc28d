import json
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.domain.entities import BLOCK_TYPES, ContentBlock, ProductLink
from src.rules.models import PostRules

_blocks_adapter: TypeAdapter[list[ContentBlock]] = TypeAdapter(list[ContentBlock])

DEFAULT_UNNAMED_PRODUCT = "Unnamed product"


def decode_list(raw: Any, field: str) -> list[Any]:
    """
    Accept a list or its JSON text form (multipart form fields carry text).

    Raises:
        ValueError: If the text is not JSON or does not decode to a list.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"'{field}' is not valid JSON: {e.msg}") from e
    if not isinstance(raw, list):
        raise ValueError(f"'{field}' must be a list.")
    return raw


class BlockValidator:
    def __init__(self, rules: PostRules | None = None):
        self.allowed_types = tuple(rules.block_types) if rules else BLOCK_TYPES
        self.max_blocks = rules.max_blocks_per_post if rules else None
        self.unnamed_product = rules.unnamed_product if rules else DEFAULT_UNNAMED_PRODUCT

    def validate(self, raw_blocks: Any) -> list[ContentBlock]:
        """
        Validate the block list. Invalid elements fail the whole list.

        Raises:
            ValueError: If validation fails.
        """
        items = decode_list(raw_blocks, "blocks")

        if self.max_blocks is not None and len(items) > self.max_blocks:
            raise ValueError(f"Too many blocks (max {self.max_blocks}).")

        seen: set[str] = set()
        for index, item in enumerate(items):
            self._check_shape(index, item)
            if item["id"] in seen:
                raise ValueError(f"Duplicate block id '{item['id']}'.")
            seen.add(item["id"])

        try:
            return _blocks_adapter.validate_python(items)
        except PydanticValidationError as e:
            first = e.errors()[0]
            location = ".".join(str(p) for p in first["loc"])
            raise ValueError(f"Invalid block at {location}: {first['msg']}") from e

    def _check_shape(self, index: int, item: Any) -> None:
        if not isinstance(item, dict):
            raise ValueError(f"Block {index} must be an object.")

        block_id = item.get("id")
        if not isinstance(block_id, str) or not block_id.strip():
            raise ValueError(f"Block {index} is missing an id.")

        block_type = item.get("type")
        if block_type not in self.allowed_types:
            raise ValueError(f"Block type '{block_type}' is not allowed.")

        if item.get("data") is None:
            raise ValueError(f"Block '{block_id}' is missing data.")
        if not isinstance(item["data"], dict):
            raise ValueError(f"Block '{block_id}' data must be an object.")

    def normalize_product_links(self, raw_links: Any) -> list[ProductLink]:
        """
        Lenient: a missing name gets the placeholder, a missing url becomes "".
        Only a non-list (or undecodable text) is rejected.
        """
        items = decode_list(raw_links, "productLinks")
        links: list[ProductLink] = []
        for index, item in enumerate(items):
            if not isinstance(item, dict):
                raise ValueError(f"Product link {index} must be an object.")
            name = item.get("name")
            url = item.get("url")
            links.append(
                ProductLink(
                    name=str(name) if name else self.unnamed_product,
                    url=str(url) if url else "",
                )
            )
        return links
