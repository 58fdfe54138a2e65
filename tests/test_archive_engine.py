import io
import unittest

from cmdunpack import (
    PIPELINES,
    CommandNotFoundError,
    DecodeError,
    NameMismatchError,
    TargetPlatform,
    select_pipeline,
    uncompress_command,
)
from cmdunpack.ArchiveEngine import get_extractor
from cmdunpack.TarArchive import TarArchiveEngine
from cmdunpack.ZipArchive import ZipArchiveEngine

from .builders import make_gzip, make_tar, make_xz, make_zip

LINUX = TargetPlatform("linux", "amd64")
BINARY = b"\x7fELF" + bytes(range(256)) * 8


class SelectPipelineTests(unittest.TestCase):
    def test_suffix_table(self):
        cases = {
            "https://example.com/foo.zip": "zip",
            "https://example.com/foo.tar.gz": "tar.gz",
            "https://example.com/foo.tgz": "tar.gz",
            "https://example.com/foo.gz": "gzip",
            "https://example.com/foo.gzip": "gzip",
            "https://example.com/foo.tar.xz": "tar.xz",
            "https://example.com/foo.xz": "xz",
        }
        for source_id, name in cases.items():
            with self.subTest(source_id=source_id):
                self.assertEqual(select_pipeline(source_id).name, name)

    def test_most_specific_suffix_listed_first(self):
        names = [p.name for p in PIPELINES]
        self.assertLess(names.index("tar.gz"), names.index("gzip"))
        self.assertLess(names.index("tar.xz"), names.index("xz"))

    def test_unknown_suffixes_need_no_pipeline(self):
        for source_id in ("foo", "foo.tar", "foo.bz2", "foo.ZIP", "foo.tar.GZ", "foo.zip?dl=1", ""):
            with self.subTest(source_id=source_id):
                self.assertIsNone(select_pipeline(source_id))

    def test_get_extractor_builds_engine(self):
        engine = get_extractor(io.BytesIO(make_zip({"foo": BINARY})), "foo.zip")
        self.assertIsInstance(engine, ZipArchiveEngine)
        engine = get_extractor(io.BytesIO(make_tar({"foo": BINARY})), "foo.tgz")
        self.assertIsInstance(engine, TarArchiveEngine)
        self.assertEqual(engine.compression, "gz")
        self.assertIsNone(get_extractor(io.BytesIO(BINARY), "foo"))


class UncompressCommandTests(unittest.TestCase):
    def test_passthrough_returns_input_unconsumed(self):
        for source_id in ("https://example.com/foo", "foo.exe", "foo.tar", "foo.bz2"):
            with self.subTest(source_id=source_id):
                src = io.BytesIO(BINARY)
                result = uncompress_command(src, source_id, "foo", LINUX)
                self.assertIs(result, src)
                self.assertEqual(src.tell(), 0)

    def test_each_format(self):
        assets = {
            "foo.zip": make_zip({"foo": BINARY}),
            "foo.tar.gz": make_tar({"foo": BINARY}),
            "foo.tgz": make_tar({"foo": BINARY}),
            "foo.gz": make_gzip(BINARY, "foo"),
            "foo.gzip": make_gzip(BINARY, "foo"),
            "foo.tar.xz": make_tar({"foo": BINARY}, compression="xz"),
            "foo.xz": make_xz(BINARY),
        }
        for source_id, data in assets.items():
            with self.subTest(source_id=source_id):
                result = uncompress_command(io.BytesIO(data), source_id, "foo", LINUX)
                self.assertEqual(result.read(), BINARY)

    def test_platform_qualified_member(self):
        data = make_tar({"foo_1.0/README.md": b"docs", "foo_1.0/foo-linux-amd64": BINARY})
        result = uncompress_command(io.BytesIO(data), "foo_1.0_linux_amd64.tar.gz", "foo", LINUX)
        self.assertEqual(result.read(), BINARY)

    def test_same_bytes_give_same_output(self):
        data = make_zip({"bin/foo": BINARY, "README": b"hi"}, dirs=("bin",))
        first = uncompress_command(io.BytesIO(data), "foo.zip", "foo", LINUX).read()
        second = uncompress_command(io.BytesIO(data), "foo.zip", "foo", LINUX).read()
        self.assertEqual(first, second)
        self.assertEqual(first, BINARY)

    def test_empty_command_is_rejected(self):
        src = io.BytesIO(make_zip({"foo": BINARY}))
        with self.assertRaises(ValueError):
            uncompress_command(src, "foo.zip", "", LINUX)
        self.assertEqual(src.tell(), 0)

    def test_tar_suffix_wins_over_gzip(self):
        # A .tar.gz must be scanned as tar, not checked against the gzip header name.
        data = make_tar({"foo": BINARY})
        result = uncompress_command(io.BytesIO(data), "release.tar.gz", "foo", LINUX)
        self.assertEqual(result.read(), BINARY)

    def test_gzip_name_mismatch(self):
        data = make_gzip(BINARY, "mytool")
        self.assertEqual(uncompress_command(io.BytesIO(data), "mytool.gz", "mytool", LINUX).read(), BINARY)
        with self.assertRaises(NameMismatchError):
            uncompress_command(io.BytesIO(data), "mytool.gz", "othertool", LINUX)

    def test_errors_carry_source_id(self):
        with self.assertRaises(CommandNotFoundError) as ctx:
            uncompress_command(io.BytesIO(make_zip({"bar": BINARY})), "https://example.com/foo.zip", "foo", LINUX)
        self.assertEqual(ctx.exception.source_id, "https://example.com/foo.zip")
        self.assertIn("'foo'", str(ctx.exception))

        with self.assertRaises(DecodeError) as ctx:
            uncompress_command(io.BytesIO(b"not an archive"), "https://example.com/foo.zip", "foo", LINUX)
        self.assertEqual(ctx.exception.stage, "zip")
        self.assertIn("https://example.com/foo.zip", str(ctx.exception))
        self.assertIsNotNone(ctx.exception.__cause__)


if __name__ == "__main__":
    unittest.main()
