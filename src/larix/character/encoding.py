"""Input normalization and strict UTF-8 decoding.

Markup is tokenized as UTF-8 bytes. Text input is encoded up front; byte
input is taken as UTF-8 with an optional byte order mark. Every name,
attribute value and payload extracted from the byte stream is decoded
strictly, and failures are reported as ``NonDecodable``.
"""

import codecs
from dataclasses import dataclass
from typing import Union

from larix.shared.errors import NonDecodable

UTF8_BOM = codecs.BOM_UTF8

InputType = Union[str, bytes, bytearray, memoryview]


@dataclass
class NormalizedInput:
    """UTF-8 byte view of the caller's input.

    Attributes:
        data: Bytes handed to the tokenizer (byte order mark removed)
        character_count: Length of the original input in characters, or in
            bytes when the input was binary
        had_bom: Whether a UTF-8 byte order mark was skipped
    """

    data: bytes
    character_count: int
    had_bom: bool = False


def normalize_input(value: InputType) -> NormalizedInput:
    """Convert text or bytes input into the byte form the tokenizer reads.

    Args:
        value: Markup as ``str`` or a bytes-like object

    Returns:
        NormalizedInput wrapping the UTF-8 bytes

    Raises:
        TypeError: If ``value`` is neither text nor bytes-like
    """
    if isinstance(value, str):
        return NormalizedInput(
            data=value.encode("utf-8", "surrogatepass"),
            character_count=len(value),
        )

    if isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        had_bom = data.startswith(UTF8_BOM)
        if had_bom:
            data = data[len(UTF8_BOM):]
        return NormalizedInput(data=data, character_count=len(data), had_bom=had_bom)

    raise TypeError(
        f"Markup input must be str or bytes, not {type(value).__name__}"
    )


def decode(raw: bytes) -> str:
    """Decode a raw name, attribute value or payload as strict UTF-8.

    Raises:
        NonDecodable: If ``raw`` is not valid UTF-8
    """
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise NonDecodable(e) from e
