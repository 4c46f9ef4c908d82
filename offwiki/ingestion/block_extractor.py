"""Random-access extraction of one compressed block from a multistream dump."""

import bz2
from pathlib import Path

import structlog

from offwiki.utils.exceptions import ArchiveReadError, CodecError, TextDecodeError

logger = structlog.get_logger(__name__)


def decompress_multistream(data: bytes) -> bytes:
    """Decompress back-to-back bz2 frames as one continuous stream.

    Args:
        data: Compressed bytes holding one or more complete frames

    Returns:
        Concatenated decompressed bytes

    Raises:
        CodecError: If a frame is corrupt or truncated, or no frame is present
    """
    chunks: list[bytes] = []
    frames = 0
    remaining = data

    while remaining:
        decompressor = bz2.BZ2Decompressor()
        try:
            chunks.append(decompressor.decompress(remaining))
        except (OSError, ValueError) as e:
            raise CodecError(f"corrupt bz2 frame #{frames + 1}: {e}") from e
        if not decompressor.eof:
            raise CodecError(f"bz2 frame #{frames + 1} is truncated")
        frames += 1
        remaining = decompressor.unused_data

    if frames == 0:
        raise CodecError("no compressed frame in block")

    logger.debug("frames_decompressed", frames=frames, compressed_bytes=len(data))
    return b"".join(chunks)


def read_block(dump_path: str | Path, byte_offset: int, byte_length: int) -> bytes:
    """Read exactly ``byte_length`` bytes at ``byte_offset``.

    Raises:
        ValueError: If the offset is negative or the length not positive
        ArchiveReadError: If the file cannot be opened or read, or is too short
    """
    if byte_offset < 0:
        raise ValueError(f"Byte offset cannot be negative: {byte_offset}")
    if byte_length <= 0:
        raise ValueError(f"Byte length must be positive: {byte_length}")

    dump_path = Path(dump_path)
    try:
        with dump_path.open("rb") as f:
            f.seek(byte_offset)
            data = f.read(byte_length)
    except OSError as e:
        raise ArchiveReadError(f"cannot read {dump_path}: {e}") from e

    if len(data) != byte_length:
        raise ArchiveReadError(
            f"short read from {dump_path}: wanted {byte_length} bytes at "
            f"{byte_offset}, got {len(data)}"
        )
    return data


def extract_block(dump_path: str | Path, byte_offset: int, byte_length: int) -> str:
    """Read one block from the archive and decode it to text.

    Either the whole block is returned or an error is raised; there is no
    partial output.

    Args:
        dump_path: Path to the ``*-multistream.xml.bz2`` archive
        byte_offset: Offset of the block, as listed in the index
        byte_length: Compressed size of the block

    Returns:
        Decompressed UTF-8 text of the block

    Raises:
        ArchiveReadError: On I/O failure or short read
        CodecError: On a corrupt or truncated frame
        TextDecodeError: If the decompressed bytes are not valid UTF-8
    """
    data = read_block(dump_path, byte_offset, byte_length)
    raw = decompress_multistream(data)

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise TextDecodeError(
            f"block at offset {byte_offset} is not valid UTF-8: {e.reason} at byte {e.start}"
        ) from e

    logger.info(
        "block_extracted",
        path=str(dump_path),
        offset=byte_offset,
        compressed_bytes=byte_length,
        decompressed_bytes=len(raw),
    )
    return text
