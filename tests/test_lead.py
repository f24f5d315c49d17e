import unittest

from atmfjstc.lib.rpm_header import parse_lead, Lead, RPMError, RPMFileError, LEAD_SIZE

from rpm_samples import build_lead, build_sample_archive, SAMPLE_NAME


class ParseLeadTest(unittest.TestCase):
    def test_ok(self):
        lead, rest = parse_lead(build_sample_archive()[:LEAD_SIZE])

        self.assertEqual(lead, Lead(
            major=3,
            minor=0,
            rpm_type=0,
            archnum=1,
            name=SAMPLE_NAME,
            osnum=1,
            signature_type=5,
        ))
        self.assertEqual(len(rest), 0)

    def test_residual_follows_lead(self):
        data = build_lead() + b'\x8E\xAD\xE8'
        _, rest = parse_lead(data)

        self.assertEqual(bytes(rest), b'\x8E\xAD\xE8')

    def test_deterministic(self):
        data = build_lead()

        self.assertEqual(parse_lead(data)[0], parse_lead(data)[0])

    def test_bad_magic(self):
        with self.assertRaises(RPMError) as cm:
            parse_lead(bytes(LEAD_SIZE))

        self.assertTrue(cm.exception.is_file_error(RPMFileError.BAD_MAGIC))
        self.assertEqual(cm.exception.position, 0)

    def test_empty(self):
        with self.assertRaises(RPMError) as cm:
            parse_lead(b'')

        self.assertTrue(cm.exception.is_incomplete)
        self.assertEqual(cm.exception.needed, 4)

    def test_short(self):
        with self.assertRaises(RPMError) as cm:
            parse_lead(b'\xED\xAB\xEE\xDB\x03\x00')

        self.assertTrue(cm.exception.is_incomplete)
        self.assertEqual(cm.exception.needed, 8)

    def test_truncated_in_name(self):
        with self.assertRaises(RPMError) as cm:
            parse_lead(build_lead()[:20])

        self.assertEqual(cm.exception.needed, 76)

    def test_truncated_in_reserved_area(self):
        with self.assertRaises(RPMError) as cm:
            parse_lead(build_lead()[:LEAD_SIZE - 1])

        self.assertEqual(cm.exception.needed, LEAD_SIZE)

    def test_name_without_terminator(self):
        data = bytearray(build_lead())
        data[10:76] = b'x' * 66

        with self.assertRaises(RPMError) as cm:
            parse_lead(bytes(data))

        self.assertTrue(cm.exception.is_file_error(RPMFileError.BAD_HEADER))
        self.assertEqual(cm.exception.position, 10)

    def test_name_not_utf8(self):
        data = bytearray(build_lead())
        data[10:13] = b'\xff\xfe\x00'

        with self.assertRaises(RPMError) as cm:
            parse_lead(bytes(data))

        self.assertTrue(cm.exception.is_file_error(RPMFileError.BAD_HEADER))

    def test_source_package(self):
        lead, _ = parse_lead(build_lead(name='foo-1.0-1.src', rpm_type=1))

        self.assertTrue(lead.is_source)
        self.assertEqual(str(lead), "foo-1.0-1.src (source package, RPM format v3.0)")

    def test_signed_fields(self):
        lead, _ = parse_lead(build_lead(archnum=-1, osnum=-2))

        self.assertEqual(lead.archnum, -1)
        self.assertEqual(lead.osnum, -2)

    def test_repr(self):
        lead, _ = parse_lead(build_lead())

        self.assertIn(f"name='{SAMPLE_NAME}'", repr(lead))
