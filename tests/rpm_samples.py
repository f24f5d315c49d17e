"""
Builders for synthetic RPM header data.

The sample archive reproduces the layout of a real Fedora package (hardlink-1.0-23.fc24.x86_64): same Lead, same
Signature section table, a Header section with 0x3e tags, and an XZ-compressed payload start.
"""

import struct

from typing import Iterable, Tuple


LEAD_MAGIC = b'\xED\xAB\xEE\xDB'
SECTION_MAGIC = b'\x8E\xAD\xE8'
XZ_MAGIC = b'\xFD7zXZ\x00'

SAMPLE_NAME = 'hardlink-1:1.0-23.fc24'

# (tag, type code, offset, count)
SAMPLE_SIGNATURE_ENTRIES = (
    (0x03e, 7, 0x1474, 0x10),
    (0x10c, 7, 0x0000, 0x218),
    (0x10d, 6, 0x0218, 0x1),
    (0x3e8, 4, 0x0244, 0x1),
    (0x3ea, 7, 0x0248, 0x218),
    (0x3ec, 7, 0x0460, 0x10),
    (0x3ef, 4, 0x0470, 0x1),
    (0x3f0, 7, 0x0474, 0x1000),
)
SAMPLE_SIGNATURE_STORE_SIZE = 0x1484
SAMPLE_SHA1 = 'd2f3a1b7c9e8f0a1b2c3d4e5f60718293a4b5c6d'
SAMPLE_SIZE = 0x4c1c
SAMPLE_PAYLOAD_SIZE = 0x9e30

SAMPLE_HEADER_TAG_COUNT = 0x3e
SAMPLE_NAME_TAG = 0x3e8


def build_lead(
    name: str = SAMPLE_NAME, major: int = 3, minor: int = 0, rpm_type: int = 0, archnum: int = 1, osnum: int = 1,
    signature_type: int = 5, magic: bytes = LEAD_MAGIC
) -> bytes:
    return b''.join([
        magic,
        struct.pack('>BBhh', major, minor, rpm_type, archnum),
        name.encode('utf-8').ljust(66, b'\x00'),
        struct.pack('>hh', osnum, signature_type),
        bytes(16),
    ])


def build_section_header(count: int, size: int, version: int = 1, magic: bytes = SECTION_MAGIC) -> bytes:
    return magic + struct.pack('>B4xII', version, count, size)


def build_tag_entry(tag: int, type_code: int, offset: int, count: int) -> bytes:
    return struct.pack('>IIII', tag, type_code, offset, count)


def build_section(entries: Iterable[Tuple[int, int, int, int]], store: bytes, version: int = 1) -> bytes:
    entries = list(entries)

    return b''.join([
        build_section_header(len(entries), len(store), version),
        *(build_tag_entry(*entry) for entry in entries),
        store,
    ])


def build_sample_signature_store() -> bytes:
    store = bytearray(SAMPLE_SIGNATURE_STORE_SIZE)

    store[0x0000:0x0218] = bytes((i * 7) & 0xff for i in range(0x218))
    store[0x0218:0x0218 + 41] = SAMPLE_SHA1.encode('ascii') + b'\x00'
    store[0x0244:0x0248] = struct.pack('>I', SAMPLE_SIZE)
    store[0x0248:0x0460] = bytes((i * 13) & 0xff for i in range(0x218))
    store[0x0460:0x0470] = bytes(range(0x10))
    store[0x0470:0x0474] = struct.pack('>I', SAMPLE_PAYLOAD_SIZE)
    store[0x1474:0x1484] = bytes(range(0xf0, 0x100))

    return bytes(store)


def build_sample_header_section() -> Tuple[bytes, bytes]:
    """
    Returns the Header section and its store separately. The name tag points at offset 2 of the store.
    """

    store = bytearray(b'\x00\x00hardlink\x00')
    entries = [(SAMPLE_NAME_TAG, 6, 2, 1)]

    for tag in range(SAMPLE_NAME_TAG + 1, SAMPLE_NAME_TAG + SAMPLE_HEADER_TAG_COUNT):
        while len(store) % 4 != 0:
            store.append(0)

        entries.append((tag, 4, len(store), 1))
        store += struct.pack('>I', tag * 3)

    store = bytes(store)

    return build_section(entries, store), store


def build_sample_archive(payload: bytes = XZ_MAGIC + b'payload data') -> bytes:
    signature = build_section(SAMPLE_SIGNATURE_ENTRIES, build_sample_signature_store())
    padding = bytes((8 - SAMPLE_SIGNATURE_STORE_SIZE % 8) % 8)
    header, _ = build_sample_header_section()

    return b''.join([build_lead(), signature, padding, header, payload])
