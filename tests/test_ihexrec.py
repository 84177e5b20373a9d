# -*- coding: utf-8 -*-
from click.testing import CliRunner

import ihexrec
from ihexrec.cli import main


def test_main():
    runner = CliRunner()
    result = runner.invoke(main, [])

    assert result.output.startswith('Usage:')
    assert result.exit_code in (0, 2)


def test_exports():
    record = ihexrec.IhexRecord.parse(':00000001FF')
    assert record.tag is ihexrec.IhexTag.END_OF_FILE
    assert ihexrec.compute_checksum(0, 0, 0, 1) == 0xFF
    assert issubclass(ihexrec.ChecksumError, ihexrec.RecordError)
    assert issubclass(ihexrec.RecordFormatError, ihexrec.RecordError)
    assert list(ihexrec.parse_lines([':00000001FF'])) == [record]
    assert list(ihexrec.format_lines([record])) == [':00000001FF\r\n']
    assert ihexrec.IhexFile([record]).records == [record]
    assert callable(ihexrec.load_records)
    assert callable(ihexrec.save_records)
