"""
Test recording and replay through the engine.

Verifies document persistence, naming and format errors.
"""

import json
import tempfile

import pytest

from call_recorder import (
    NULL,
    Blob,
    DocumentFormatError,
    ErrorValue,
    InvalidValueError,
    Mapping,
    Opaque,
    Primitive,
    RecorderEngine,
    Sequence,
    StoreReadError,
    StoreWriteError,
    classify,
)


class FixedClock:
    def __init__(self, seconds):
        self.seconds = seconds

    def __call__(self):
        return self.seconds


class TestRecordReplay:
    """Test writing recordings and reading them back."""

    @pytest.fixture
    def engine(self):
        """Create a temporary recorder for testing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            engine = RecorderEngine(tmpdir, clock=FixedClock(1700000000.5))
            engine.initialize()
            yield engine

    @pytest.mark.asyncio
    async def test_record_writes_named_document(self, engine):
        path = await engine.record(Mapping({'label': Primitive("hi")}), 'session')

        assert path.name == "1700000000500-session.json"
        assert path.parent == engine.root_dir

    @pytest.mark.asyncio
    async def test_document_is_two_space_indented_json(self, engine):
        value = Mapping({'audio': Blob(bytes([1, 2, 3, 4, 5])), 'label': Primitive("greeting"), 'meta': NULL})

        path = await engine.record(value, 'receive')

        text = path.read_text(encoding='utf-8')
        assert text == (
            '{\n'
            '  "audio": {\n'
            '    "$buffer": "7cfdd07889b3295d6a550914ab35e068.wav"\n'
            '  },\n'
            '  "label": "greeting",\n'
            '  "meta": null\n'
            '}'
        )

    @pytest.mark.asyncio
    async def test_replay_round_trip(self, engine):
        value = Mapping({
            'audio': Blob(b"RIFF....WAVE"),
            'events': Sequence([Primitive("start"), Primitive("stop")]),
            'meta': NULL,
        })

        path = await engine.record(value, 'send')

        assert await engine.replay(path) == value

    @pytest.mark.asyncio
    async def test_replay_by_relative_name(self, engine):
        path = await engine.record(Primitive("x"), 'session')
        assert await engine.replay(path.name) == Primitive("x")

    @pytest.mark.asyncio
    async def test_replay_is_lossy_for_opaque_and_errors(self, engine):
        value = Mapping({
            'handler': Opaque("function"),
            'error': ErrorValue("TypeError", "bad", "..."),
        })

        replayed = await engine.replay(await engine.record(value, 'session'))

        assert replayed == Mapping({
            'handler': NULL,
            'error': Mapping({
                'name': Primitive("TypeError"),
                'message': Primitive("bad"),
                'stack': Primitive("..."),
            }),
        })

    @pytest.mark.asyncio
    async def test_same_millisecond_recordings_do_not_clobber(self, engine):
        first = await engine.record(Primitive(1), 'receive')
        second = await engine.record(Primitive(2), 'receive')

        assert first != second
        assert engine.list_recordings() == [first.name, second.name]
        assert await engine.replay(first) == Primitive(1)
        assert await engine.replay(second) == Primitive(2)

    @pytest.mark.asyncio
    async def test_recordings_share_blobs(self, engine):
        audio = Blob(b"shared audio")

        await engine.record(Mapping({'audio': audio}), 'receive')
        await engine.record(Mapping({'audio': audio}), 'send')

        stats = engine.get_statistics()
        assert stats['total_blobs'] == 1
        assert stats['documents'] == 2

    @pytest.mark.asyncio
    async def test_record_native_data(self, engine):
        native = {'audio': b"\x00\x01", 'tags': ("a", "b"), 'n': None}

        replayed = await engine.replay(await engine.record(classify(native), 'session'))

        assert replayed.to_native() == {'audio': b"\x00\x01", 'tags': ["a", "b"], 'n': None}

    @pytest.mark.asyncio
    async def test_empty_kind_rejected_before_encoding(self, engine):
        for kind in ('', '...', None):
            with pytest.raises(InvalidValueError):
                await engine.record(Blob(b"data"), kind)
        assert engine.store.list_blobs() == []

    @pytest.mark.asyncio
    async def test_kind_is_sanitized_into_file_name(self, engine):
        path = await engine.record(Primitive("x"), '../receive/audio')

        assert path.parent == engine.root_dir
        assert path.name == "1700000000500-_receive_audio.json"

    @pytest.mark.asyncio
    async def test_encode_and_decode_without_persistence(self, engine):
        value = Sequence([Blob(b"a"), Primitive("b")])

        document = await engine.encode_to_document(value)

        assert engine.list_recordings() == []
        assert await engine.decode_from_document(document) == value


class TestReplayFailures:
    """Test that replay either fully succeeds or fully fails."""

    @pytest.fixture
    def engine(self, tmp_path):
        engine = RecorderEngine(tmp_path)
        engine.initialize()
        return engine

    @pytest.mark.asyncio
    async def test_invalid_json(self, engine):
        path = engine.root_dir / "broken.json"
        path.write_text('{ invalid json }', encoding='utf-8')

        with pytest.raises(DocumentFormatError) as exc_info:
            await engine.replay(path)
        assert exc_info.value.path == str(path)

    @pytest.mark.asyncio
    async def test_nan_constant_rejected(self, engine):
        path = engine.root_dir / "nan.json"
        path.write_text('{"x": NaN}', encoding='utf-8')

        with pytest.raises(DocumentFormatError):
            await engine.replay(path)

    @pytest.mark.asyncio
    async def test_missing_document(self, engine):
        with pytest.raises(DocumentFormatError):
            await engine.replay("does-not-exist.json")

    @pytest.mark.asyncio
    async def test_missing_blob(self, engine):
        path = await engine.record(Sequence([Primitive(1), Blob(b"audio")]), 'session')
        for identifier in engine.store.list_blobs():
            (engine.root_dir / identifier).unlink()

        with pytest.raises(StoreReadError):
            await engine.replay(path)

    @pytest.mark.asyncio
    async def test_failed_encode_writes_no_document(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        engine = RecorderEngine(blocker / "store")

        with pytest.raises(StoreWriteError):
            await engine.record(Mapping({'audio': Blob(b"data")}), 'session')
        assert engine.list_recordings() == []

    @pytest.mark.asyncio
    async def test_hand_written_document(self, engine):
        identifier = await engine.store.put(b"clip")
        path = engine.root_dir / "manual.json"
        path.write_text(
            json.dumps({'clip': {'$buffer': identifier}, 'fn': {'$type': "Function"}}),
            encoding='utf-8',
        )

        value = await engine.replay(path)

        assert value == Mapping({'clip': Blob(b"clip"), 'fn': NULL})


class TestEngineOptions:
    """Test hashing options passed through the engine."""

    @pytest.mark.asyncio
    async def test_sha256_base64_identifiers(self, tmp_path):
        engine = RecorderEngine(tmp_path, hash_algorithm='sha256', hash_digest_encoding='base64')

        document = await engine.encode_to_document(Blob(b"Hello, World!"))

        identifier = document['$buffer']
        assert identifier.endswith('.wav')
        assert '/' not in identifier
        assert await engine.decode_from_document(document) == Blob(b"Hello, World!")

    @pytest.mark.asyncio
    async def test_blake3_identifiers(self, tmp_path):
        engine = RecorderEngine(tmp_path, hash_algorithm='blake3', blob_extension='pcm')

        document = await engine.encode_to_document(Blob(b"x"))

        assert document['$buffer'].endswith('.pcm')
        assert len(document['$buffer']) == 64 + len('.pcm')
