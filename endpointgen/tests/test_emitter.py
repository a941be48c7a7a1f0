"""Tests for the file emitter."""

import pytest

from endpointgen.codegen.emitter import FileEmitter
from endpointgen.codegen.types import ArtifactKind
from endpointgen.exceptions import OutputError


@pytest.fixture
def emitter(tmp_path):
    emitter = FileEmitter(tmp_path / 'out')
    emitter.reset()
    return emitter


def test_reset_clears_directory(tmp_path):
    output = tmp_path / 'out'
    (output / 'nested').mkdir(parents=True)
    (output / 'nested' / 'old.ts').write_text('old')

    FileEmitter(output).reset()

    assert output.is_dir()
    assert list(output.iterdir()) == []


def test_write_creates_parents(emitter, tmp_path):
    artifact = emitter.write_text('vtl/a-request.vtl', 'x', ArtifactKind.REQUEST_TEMPLATE)
    assert artifact.path == 'vtl/a-request.vtl'
    assert (tmp_path / 'out' / 'vtl' / 'a-request.vtl').read_text() == 'x'


def test_write_keeps_line_endings(emitter, tmp_path):
    emitter.write_text('a.ts', 'line\r\nnext\n', ArtifactKind.CLIENT_SOURCE)
    assert (tmp_path / 'out' / 'a.ts').read_bytes() == b'line\r\nnext\n'


def test_copy_is_byte_exact(emitter, tmp_path):
    source = tmp_path / 'Topping.ts'
    source.write_bytes(b'export interface Topping {}\r\n\xef\xbb\xbf')
    emitter.copy(source, 'interfaces/Topping.ts', ArtifactKind.INTERFACE)
    assert (tmp_path / 'out' / 'interfaces' / 'Topping.ts').read_bytes() == source.read_bytes()


def test_rewrite_keeps_single_artifact(emitter):
    emitter.write_text('index.ts', 'a\n', ArtifactKind.INDEX)
    emitter.write_text('apiClient.ts', 'b\n', ArtifactKind.CLIENT_SOURCE)
    emitter.write_text('index.ts', 'a\nc\n', ArtifactKind.INDEX)

    assert [a.path for a in emitter.artifacts] == ['apiClient.ts', 'index.ts']
    assert emitter.read_text('index.ts') == 'a\nc\n'
    assert emitter.artifacts[-1].kind is ArtifactKind.INDEX


def test_missing_copy_source(emitter, tmp_path):
    with pytest.raises(OutputError):
        emitter.copy(tmp_path / 'missing.ts', 'interfaces/missing.ts', ArtifactKind.INTERFACE)


def test_write_failure(emitter, tmp_path):
    (tmp_path / 'out' / 'blocked').write_text('not a directory')
    with pytest.raises(OutputError, match='blocked'):
        emitter.write_text('blocked/a.ts', 'x', ArtifactKind.CLIENT_SOURCE)
