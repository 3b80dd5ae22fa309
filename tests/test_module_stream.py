"""Tests for incremental decoding of go list -m -json output."""

import io
import json

import pytest

from xportal.exceptions import IntrospectionError
from xportal.modules.stream import iter_module_records


GO_LIST_OUTPUT = """{
\t"Path": "example.com/app",
\t"Main": true,
\t"Dir": "/home/u/app",
\t"GoMod": "/home/u/app/go.mod",
\t"GoVersion": "1.22"
}
{
\t"Path": "example.com/dep",
\t"Version": "v1.0.0",
\t"Replace": {
\t\t"Path": "../dep",
\t\t"Dir": "/home/u/dep"
\t}
}
"""


class ChunkCountingStream(io.StringIO):
    """StringIO that records how much is read per call."""

    def __init__(self, value):
        super().__init__(value)
        self.reads = []

    def read(self, size=-1):
        chunk = super().read(size)
        self.reads.append(len(chunk))
        return chunk


class TestIterModuleRecords:
    """Test record-at-a-time decoding."""

    def test_decodes_concatenated_objects(self):
        records = list(iter_module_records(io.StringIO(GO_LIST_OUTPUT)))

        assert [r.path for r in records] == ["example.com/app", "example.com/dep"]
        assert records[0].main is True
        assert records[0].dir == "/home/u/app"
        assert records[1].version == "v1.0.0"
        assert records[1].replace.path == "../dep"
        assert records[1].replace.version == ""

    def test_records_split_across_reads(self):
        """Tiny reads force every record to span several chunks."""
        records = list(iter_module_records(io.StringIO(GO_LIST_OUTPUT), chunk_size=7))

        assert [r.path for r in records] == ["example.com/app", "example.com/dep"]

    def test_lazy_decoding(self):
        """The first record is available before the rest of the stream is read."""
        stream = ChunkCountingStream(GO_LIST_OUTPUT)
        records = iter_module_records(stream, chunk_size=16)

        first = next(records)

        assert first.path == "example.com/app"
        assert sum(stream.reads) < len(GO_LIST_OUTPUT)

    def test_empty_stream(self):
        assert list(iter_module_records(io.StringIO(""))) == []
        assert list(iter_module_records(io.StringIO("  \n\t"))) == []

    def test_malformed_record_carries_decode_error(self):
        stream = io.StringIO('{"Path": "example.com/app", "Main": true}\n{"Path": ')

        records = iter_module_records(stream)
        assert next(records).path == "example.com/app"

        with pytest.raises(IntrospectionError) as exc_info:
            next(records)

        assert isinstance(exc_info.value.decode_error, json.JSONDecodeError)
        assert exc_info.value.__cause__ is exc_info.value.decode_error
        assert "malformed module record" in str(exc_info.value)

    def test_non_object_record_rejected(self):
        with pytest.raises(IntrospectionError, match="JSON object"):
            list(iter_module_records(io.StringIO('["not", "a", "module"]')))

    def test_malformed_record_fails_without_reading_ahead(self):
        """A bad record is reported at once instead of pulling in the rest of the stream."""
        valid = '{"Path": "example.com/dep", "Version": "v1.0.0", "Main": false}\n'
        stream = ChunkCountingStream('{"Path": broken}\n' + valid * 10000)

        with pytest.raises(IntrospectionError) as exc_info:
            list(iter_module_records(stream, chunk_size=64))

        assert exc_info.value.decode_error is not None
        assert len(stream.reads) < 5

    def test_single_character_reads(self):
        """Literals, numbers and strings cut at any position are completed by later reads."""
        records = list(iter_module_records(io.StringIO(GO_LIST_OUTPUT), chunk_size=1))

        assert [r.path for r in records] == ["example.com/app", "example.com/dep"]
        assert records[0].main is True
