from pathlib import Path
from typing import cast as _cast

import pytest
from click.core import Command
from click.testing import CliRunner

from ihexrec import __version__ as _version
from ihexrec.__main__ import main as _main
from ihexrec.base import ChecksumError
from ihexrec.base import RecordFormatError
from ihexrec.cli import *

main = _cast(Command, main)  # suppress warnings

LINES = [
    ':020000040000FA',
    ':0312340061626391',
    ':00000001FF',
]

BUFFER = b''.join(line.encode() + b'\r\n' for line in LINES)


@pytest.fixture
def tmppath(tmpdir):
    return Path(str(tmpdir))


@pytest.fixture
def hexpath(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(BUFFER)
    return path


def test_main():
    try:
        _main('__main__')
    except SystemExit:
        pass


def test_help():
    commands = ('build', 'info', 'normalize', 'print', 'validate')
    runner = CliRunner()

    for command in commands:
        result = runner.invoke(main, [command, '--help'])
        assert result.exit_code == 0
        assert result.output.strip().startswith('Usage:')


def test_version():
    runner = CliRunner()
    result = runner.invoke(main, ['--version'])
    assert result.exit_code == 0
    assert result.output.strip() == _version


def test_build():
    runner = CliRunner()
    result = runner.invoke(main, 'build -a 0x1234 616263'.split())
    assert result.exit_code == 0
    assert result.output == ':0312340061626391\n'


def test_build_end_of_file():
    runner = CliRunner()
    result = runner.invoke(main, 'build -t 1'.split())
    assert result.exit_code == 0
    assert result.output == ':00000001FF\n'


def test_build_separators():
    runner = CliRunner()
    result = runner.invoke(main, ['build', '-a', '1234h', '61 62-63'])
    assert result.exit_code == 0
    assert result.output == ':0312340061626391\n'


def test_build_raises_count():
    runner = CliRunner()
    result = runner.invoke(main, 'build -c 2 616263'.split())
    assert result.exit_code != 0
    assert isinstance(result.exception, RecordFormatError)
    assert 'byteCount does not match length of dataSequence' in str(result.exception)


def test_build_raises_data():
    runner = CliRunner()
    result = runner.invoke(main, 'build 61626'.split())
    assert result.exit_code == 2
    assert 'invalid hex data' in result.output


def test_build_raises_type():
    runner = CliRunner()
    result = runner.invoke(main, 'build -t 256'.split())
    assert result.exit_code == 2
    assert "invalid byte: '256'" in result.output


def test_build_raises_address():
    runner = CliRunner()
    result = runner.invoke(main, 'build -a 0x10000'.split())
    assert result.exit_code == 2
    assert "invalid word: '0x10000'" in result.output


def test_info(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['info', str(hexpath)])
    assert result.exit_code == 0
    blocks = result.output.strip().split('\n\n')
    assert len(blocks) == 3
    assert blocks[1].startswith('Record: :0312340061626391\n')
    assert 'Byte 002: 63' in blocks[1]
    assert 'Record Type: 01 (END_OF_FILE)' in blocks[2]


def test_info_stdin():
    runner = CliRunner()
    result = runner.invoke(main, ['info', '-'], input=BUFFER)
    assert result.exit_code == 0
    assert result.output.count('Record: ') == 3


def test_normalize(tmppath):
    path_in = tmppath / 'in.hex'
    path_out = tmppath / 'out.hex'
    path_in.write_bytes(b'\n'.join(line.lower().encode() for line in LINES) + b'\n\n')
    runner = CliRunner()
    result = runner.invoke(main, ['normalize', str(path_in), str(path_out)])
    assert result.exit_code == 0
    assert result.output == ''
    assert path_out.read_bytes() == BUFFER


def test_normalize_in_place(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(b'\n'.join(line.lower().encode() for line in LINES))
    runner = CliRunner()
    result = runner.invoke(main, ['normalize', str(path)])
    assert result.exit_code == 0
    assert path.read_bytes() == BUFFER


def test_normalize_stdout(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['normalize', str(hexpath), '-'])
    assert result.exit_code == 0
    assert result.stdout_bytes == BUFFER


def test_print(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['print', str(hexpath)])
    assert result.exit_code == 0
    assert result.output == '\n'.join(LINES) + '\n'


def test_print_color(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['print', '--color', str(hexpath)])
    assert result.exit_code == 0
    assert '\x1b[' in result.output
    assert '\x1b[33m:\x1b[34m03\x1b[31m1234' in result.output


def test_print_ignore_errors(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(b':00000001FE\r\n' + BUFFER)
    runner = CliRunner()
    result = runner.invoke(main, ['print', '--ignore-errors', str(path)])
    assert result.exit_code == 0
    assert result.output == '\n'.join(LINES) + '\n'


def test_validate(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['validate', str(hexpath)])
    assert result.exit_code == 0
    assert result.output == ''


def test_validate_strict(hexpath):
    runner = CliRunner()
    result = runner.invoke(main, ['validate', '--strict', str(hexpath)])
    assert result.exit_code == 0
    assert result.output == ''


def test_validate_raises_checksum(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(BUFFER.replace(b'91\r\n', b'90\r\n'))
    runner = CliRunner()
    result = runner.invoke(main, ['validate', str(path)])
    assert result.exit_code != 0
    assert isinstance(result.exception, ChecksumError)
    assert 'line 2: wrong checksum' in str(result.exception)


def test_validate_ignore_errors(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(BUFFER.replace(b'91\r\n', b'90\r\n'))
    runner = CliRunner()
    result = runner.invoke(main, ['validate', '--ignore-errors', str(path)])
    assert result.exit_code == 0


def test_validate_strict_raises_eof(tmppath):
    path = tmppath / 'test.hex'
    path.write_bytes(BUFFER[:-len(b':00000001FF\r\n')])
    runner = CliRunner()
    result = runner.invoke(main, ['validate', '--strict', str(path)])
    assert result.exit_code != 0
    assert isinstance(result.exception, RecordFormatError)
    assert 'missing end of file record' in str(result.exception)


def test_validate_stdin():
    runner = CliRunner()
    result = runner.invoke(main, ['validate', '-'], input=BUFFER)
    assert result.exit_code == 0
