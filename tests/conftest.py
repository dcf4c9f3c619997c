import base64
import gzip
from collections.abc import Callable

import pytest

from gdguides.codec import xor_mask

PLAIN_LEVEL = (
    "kS38,1_40_2_125_3_255_11_255_12_255_13_255_4_-1_6_1000_7_1_15_1_18_0_8_1|,"
    "kA13,0,kA15,0,kA16,0,kA14,,kA6,0,kA7,0;1,1,2,15,3,15;1,1,2,45,3,15;"
)


def encode_payload(text: str) -> str:
    """gzip (10 byte header + raw deflate) wrapped in URL-safe base64, like the game writes."""
    return base64.urlsafe_b64encode(gzip.compress(text.encode("utf-8"), mtime=0)).decode("ascii")


def encode_container(text: str, padding: int = 0) -> bytes:
    return xor_mask(encode_payload(text).encode("ascii") + b"\0" * padding)


def make_blob(levels: list[tuple[str, str]]) -> str:
    entries = "".join(
        f"<k>k_{i}</k><d><k>kCEK</k><i>4</i><k>k2</k><s>{name}</s>"
        f"<k>k4</k><s>{data}</s><k>k5</k><s>Player</s><k>k13</k><t /></d>"
        for i, (name, data) in enumerate(levels)
    )
    return (
        '<?xml version="1.0"?><plist version="1.0" gjver="2.0"><dict>'
        f"<k>LLM_01</k><d><k>_isArr</k><t />{entries}</d><k>LLM_02</k><i>35</i>"
        "</dict></plist>"
    )


@pytest.fixture
def plain_level() -> str:
    return PLAIN_LEVEL


@pytest.fixture
def blob_factory() -> Callable[[list[tuple[str, str]]], str]:
    return make_blob


@pytest.fixture
def payload_encoder() -> Callable[[str], str]:
    return encode_payload


@pytest.fixture
def container_encoder() -> Callable[..., bytes]:
    return encode_container
