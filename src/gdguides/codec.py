"""Container codec for CCLocalLevels.dat style saves.

On disk the container is either plain text, or (when the first byte is the
sentinel ``C``) every byte XOR-masked with ``0x0B``. Unmasking the flagged
form yields URL-safe base64 whose decoded bytes start with a 10 byte header
followed by a raw deflate stream. Level strings embedded in the container use
the same base64 + header + deflate encoding without the XOR layer.

Only decoding is implemented. Rewritten saves go back to disk as plain text,
which the game accepts and recompresses on its next save.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import tempfile
import zlib
from pathlib import Path

from gdguides.errors import InvalidEncodingError, SaveFileError

logger = logging.getLogger(__name__)

ENCODED_SENTINEL = 0x43  # "C" once masked; unmasks to "H" of "H4sI"
XOR_KEY = 0x0B
HEADER_BYTES = 10
DEFLATE_WBITS = -15  # raw deflate, 32K window, no zlib/gzip wrapper

_XOR_TABLE = bytes(i ^ XOR_KEY for i in range(256))


def xor_mask(data: bytes) -> bytes:
    """Apply the container's byte mask. Applying it twice is the identity."""
    return data.translate(_XOR_TABLE)


def is_encoded(raw: bytes) -> bool:
    return bool(raw) and raw[0] == ENCODED_SENTINEL


def _utf8(data: bytes, step: str) -> str:
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidEncodingError(step, f"invalid UTF-8 at byte {exc.start}") from exc


def decode_payload(text: str) -> str:
    """Decode a base64 + header + deflate payload into text.

    Unpadded base64 is accepted. The leading header bytes are skipped without
    being interpreted; anything after the end of the deflate stream is ignored.
    """
    if "+" in text or "/" in text:
        raise InvalidEncodingError("base64", "standard alphabet character in URL-safe data")
    padded = text + "=" * (-len(text) % 4)
    try:
        decoded = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidEncodingError("base64", str(exc)) from exc

    if len(decoded) < HEADER_BYTES:
        raise InvalidEncodingError(
            "header", f"expected at least {HEADER_BYTES} bytes, got {len(decoded)}"
        )

    inflater = zlib.decompressobj(DEFLATE_WBITS)
    try:
        inflated = inflater.decompress(decoded[HEADER_BYTES:]) + inflater.flush()
    except zlib.error as exc:
        raise InvalidEncodingError("deflate", str(exc)) from exc
    if not inflater.eof:
        raise InvalidEncodingError("deflate", "stream ended before its final block")

    return _utf8(inflated, "payload utf-8")


def decode_container(raw: bytes) -> str:
    """Turn on-disk container bytes into the decoded text blob."""
    encoded = is_encoded(raw)
    if encoded:
        raw = xor_mask(raw)
    text = _utf8(raw, "container utf-8").rstrip("\0")
    logger.debug("container: %d bytes, encoded=%s", len(raw), encoded)
    if encoded:
        return decode_payload(text)
    return text


def encode_plain(text: str) -> bytes:
    """Plain-form container body: the decoded blob as UTF-8, unmasked and uncompressed."""
    return text.encode("utf-8")


def read_save(path: Path) -> str:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SaveFileError(f"Could not read save file {path}: {exc}") from exc
    return decode_container(raw)


def write_save(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in plain form.

    The data goes to a temporary file in the same directory first and is
    moved over the original only once fully written.
    """
    data = encode_plain(text)
    tmp_name = None
    replaced = False
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        if path.exists():
            os.chmod(tmp_name, path.stat().st_mode & 0o777)
        os.replace(tmp_name, path)
        replaced = True
    except OSError as exc:
        raise SaveFileError(f"Could not write save file {path}: {exc}") from exc
    finally:
        if not replaced and tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
    logger.info("wrote %d bytes to %s", len(data), path)
