# src/object_compressor/keys.py

"""
Destination key derivation.

The destination key is the source object's basename with its final extension
replaced by the gzip suffix. Directory components of the source key are
dropped, so ``incoming/2024/report.csv`` lands at ``report.gz``.
"""

from pathlib import PurePosixPath

GZIP_SUFFIX = ".gz"


def derive_destination_key(source_key: str, suffix: str = GZIP_SUFFIX) -> str:
    """
    Returns ``<stem><suffix>`` for *source_key*.

    Only the last extension is stripped (``archive.tar.gz`` -> ``archive.tar``).
    A basename without a dot, or whose only dot is leading (``.env``), is used
    unchanged.

    Raises ValueError if the key has no usable basename.
    """
    if not source_key:
        raise ValueError("Source key must not be empty.")

    # PurePosixPath drops trailing slashes, so 'folder/' yields 'folder'.
    name = PurePosixPath(source_key).name
    if name in ("", ".", ".."):
        raise ValueError(f"Source key has no file name: {source_key!r}")

    stem, dot, _ = name.rpartition(".")
    if not dot or not stem:
        stem = name

    return f"{stem}{suffix}"
