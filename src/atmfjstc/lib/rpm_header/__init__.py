"""
Decoder for the header region of RPM package archives.

An RPM archive starts with a fixed 96-byte identification block (the Lead), followed by two tag-indexed metadata
sections (the Signature and the Header) and then the compressed payload. This package decodes everything up to the
payload, giving read-only access to the package metadata without unpacking anything.

The main entry point is `parse_header`::

    header, payload = parse_header(data)

    print(header.lead.name)

    for entry, value in header.header.iter_values():
        print(entry.tag, value.value)

Tag IDs are passed through as plain ints; mapping them to names (1000 = name, 1001 = version etc.) is left to the
caller. Likewise, digests and signatures are exposed as raw bytes but never verified.

Section stores and Binary tag values are views into the input buffer rather than copies, so the buffer must be kept
alive (and unmodified) as long as the results are in use. All failures are reported via `RPMError`.
"""

from atmfjstc.lib.rpm_header.errors import RPMError, RPMErrorKind, RPMFileError
from atmfjstc.lib.rpm_header.ByteCursor import ByteCursor
from atmfjstc.lib.rpm_header.lead import Lead, RPMPackageType, parse_lead, LEAD_MAGIC, LEAD_SIZE
from atmfjstc.lib.rpm_header.tags import TagType, TagEntry, TagValue, tag_type_from_code
from atmfjstc.lib.rpm_header.values import decode_tag_value
from atmfjstc.lib.rpm_header.section import HeaderSectionHeader, HeaderSection, parse_section_header, \
    parse_tag_entry, parse_tag_entries, parse_section, SECTION_MAGIC, MAX_TAG_COUNT, MAX_STORE_SIZE
from atmfjstc.lib.rpm_header.header import RPMHeader, parse_header, signature_padding


__version__ = '1.0.0'
