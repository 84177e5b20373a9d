# Copyright (c) 2013-2025, Andrea Zoppi
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright
#    notice, this list of conditions and the following disclaimer in the
#    documentation and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

r"""Sequences of Intel HEX records.

Records are independent of each other: a file is just an ordered sequence of
lines, each one parsed into a record of its own.
Lines are written with a ``CR LF`` terminator regardless of the host
platform.
"""

import io
import logging
import os
import sys
from typing import IO
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Union

from deprecated import deprecated

from .base import AnyBytes
from .base import AnyPath
from .base import ChecksumError
from .base import RecordError
from .base import RecordFormatError
from .record import IhexRecord

logger = logging.getLogger(__name__)

LINE_END: str = '\r\n'
r"""Line terminator of written files."""

AnyLine = Union[str, AnyBytes]


def _strip_line(line: AnyLine) -> str:

    if isinstance(line, (bytes, bytearray, memoryview)):
        line = bytes(line).decode('latin-1')
    return line.rstrip('\r\n')


def parse_lines(
    lines: Iterable[AnyLine],
    ignore_errors: bool = False,
) -> Iterator[IhexRecord]:
    r"""Parses records from lines of text.

    Line terminators are stripped, and blank lines are skipped.

    Args:
        lines (str or bytes):
            Lines to parse, with or without terminators.

        ignore_errors (bool):
            Skip lines raising :class:`RecordError`, logging a warning.

    Yields:
        :class:`IhexRecord`: Parsed record of each non-blank line.

    Raises:
        RecordError: Error of the first bad line, with its line number
            (1-based) as :attr:`RecordError.row`.

    Examples:
        >>> from ihexrec.file import parse_lines
        >>> [r.tag.name for r in parse_lines([':0100000041BE\n', '', ':00000001FF'])]
        ['DATA', 'END_OF_FILE']
    """

    for row, line in enumerate(lines, start=1):
        text = _strip_line(line)

        if not text or text.isspace():
            continue

        try:
            record = IhexRecord.parse(text)
        except RecordError as exc:
            exc.row = row
            if ignore_errors:
                logger.warning('skipping record: %s', exc)
                continue
            raise

        yield record


def format_lines(
    records: Iterable[IhexRecord],
    end: str = LINE_END,
) -> Iterator[str]:
    r"""Renders records as lines of text.

    Args:
        records (:class:`IhexRecord` list):
            Records to render.

        end (str):
            Line terminator.

    Yields:
        str: Canonical text of each record, followed by `end`.

    Examples:
        >>> from ihexrec.file import format_lines
        >>> from ihexrec.record import IhexRecord
        >>> list(format_lines([IhexRecord.create_end_of_file()]))
        [':00000001FF\r\n']
    """

    for record in records:
        yield record.render() + end


class IhexFile:
    r"""Intel HEX record sequence.

    It holds an ordered list of records, loaded from a file or a stream, or
    provided by the user.
    No relation among the records is enforced, unless explicitly requested
    via :meth:`validate_records`.

    Examples:
        >>> from ihexrec.file import IhexFile
        >>> from ihexrec.record import IhexRecord
        >>> file = IhexFile.from_records([
        ...     IhexRecord.create_data(0x1234, b'abc'),
        ...     IhexRecord.create_end_of_file(),
        ... ])
        >>> len(file)
        2
        >>> _ = file.serialize(sys.stdout.buffer, end=b'\n')
        :0312340061626391
        :00000001FF
    """

    Record = IhexRecord

    FILE_EXT: List[str] = [
        '.hex', '.ihex', '.ihx', '.h86', '.hxh', '.hxl',
        '.mcs', '.obh', '.obl', '.a43', '.a90',
    ]
    r"""File extension(s) commonly used by Intel HEX files."""

    def __init__(self, records: Optional[Iterable[IhexRecord]] = None):

        self._records: List[IhexRecord] = list(records or ())

    def __eq__(self, other: object) -> bool:

        if not isinstance(other, IhexFile):
            return NotImplemented
        return self._records == other._records

    def __getitem__(self, key: Union[int, slice]) -> Union[IhexRecord, List[IhexRecord]]:

        return self._records[key]

    def __iter__(self) -> Iterator[IhexRecord]:

        return iter(self._records)

    def __len__(self) -> int:

        return len(self._records)

    def __ne__(self, other: object) -> bool:

        if not isinstance(other, IhexFile):
            return NotImplemented
        return self._records != other._records

    def __repr__(self) -> str:

        return f'<{self.__class__!s} @0x{id(self):08X} records:={len(self._records)}>'

    def append(self, record: IhexRecord) -> 'IhexFile':
        r"""Appends a record.

        Args:
            record (:class:`IhexRecord`):
                Record to append.

        Returns:
            :class:`IhexFile`: *self*.
        """

        self._records.append(record)
        return self

    def extend(self, records: Iterable[IhexRecord]) -> 'IhexFile':
        r"""Appends many records.

        Args:
            records (:class:`IhexRecord` list):
                Records to append.

        Returns:
            :class:`IhexFile`: *self*.
        """

        self._records.extend(records)
        return self

    @classmethod
    def from_records(cls, records: Iterable[IhexRecord]) -> 'IhexFile':
        r"""Creates a file object from records.

        Args:
            records (:class:`IhexRecord` list):
                Sequence of records, copied into a new list.

        Returns:
            :class:`IhexFile`: File object.
        """

        return cls(records)

    @classmethod
    def load(
        cls,
        in_path_or_stream: Optional[Union[AnyPath, IO]],
        ignore_errors: bool = False,
        ignore_after_termination: bool = False,
    ) -> 'IhexFile':
        r"""Loads a file object from the filesystem.

        Args:
            in_path_or_stream (str or bytes IO):
                Path of the file within the filesystem, or byte input stream.
                If ``None``, ``sys.stdin.buffer`` is used.

            ignore_errors (bool):
                Forwarded to :meth:`parse`.

            ignore_after_termination (bool):
                Forwarded to :meth:`parse`.

        Returns:
            :class:`IhexFile`: Loaded file object.

        See Also:
            :meth:`save`
            :meth:`parse`
        """

        if in_path_or_stream is None:
            in_path_or_stream = sys.stdin.buffer

        if isinstance(in_path_or_stream, io.IOBase) or hasattr(in_path_or_stream, 'read'):
            return cls.parse(in_path_or_stream,
                             ignore_errors=ignore_errors,
                             ignore_after_termination=ignore_after_termination)
        else:
            path = os.fsdecode(in_path_or_stream)
            with open(path, 'rb') as stream:
                file = cls.parse(stream,
                                 ignore_errors=ignore_errors,
                                 ignore_after_termination=ignore_after_termination)
            logger.debug('loaded %d records from %r', len(file), path)
            return file

    @classmethod
    def parse(
        cls,
        stream: Union[AnyBytes, str, IO],
        ignore_errors: bool = False,
        ignore_after_termination: bool = False,
    ) -> 'IhexFile':
        r"""Parses records from a stream or a buffer.

        Each non-blank line is parsed by :meth:`IhexRecord.parse`.

        Args:
            stream (bytes IO or buffer):
                Stream or buffer to parse records from; text streams and
                strings are accepted as well.

            ignore_errors (bool):
                Skip lines raising :class:`RecordError`.

            ignore_after_termination (bool):
                Stop parsing after the first End Of File record.

        Returns:
            :class:`IhexFile`: Parsed file object.

        Raises:
            RecordError: First bad line, if not `ignore_errors`.

        Examples:
            >>> from ihexrec.file import IhexFile
            >>> buffer = b':0312340061626391\r\n:00000001FF\r\n'
            >>> file = IhexFile.parse(buffer)
            >>> [str(record) for record in file]
            [':0312340061626391', ':00000001FF']
        """

        if isinstance(stream, (bytes, bytearray, memoryview)):
            stream = io.BytesIO(stream)
        elif isinstance(stream, str):
            stream = io.StringIO(stream)

        records = []
        for record in parse_lines(stream, ignore_errors=ignore_errors):
            records.append(record)

            if ignore_after_termination:
                if record.tag.is_file_termination():
                    break

        return cls.from_records(records)

    @property
    def records(self) -> List[IhexRecord]:
        r"""list of :class:`IhexRecord`: Stored records."""

        return self._records

    def save(
        self,
        out_path_or_stream: Optional[Union[AnyPath, IO]],
        end: AnyBytes = LINE_END.encode(),
    ) -> 'IhexFile':
        r"""Saves a file object into the filesystem.

        Args:
            out_path_or_stream (str or bytes IO):
                Path of the file within the filesystem, or output byte stream.
                If ``None``, ``sys.stdout.buffer`` is used.

            end (bytes):
                Line terminator.

        Returns:
            :class:`IhexFile`: *self*.

        See Also:
            :meth:`load`
            :meth:`serialize`
        """

        if out_path_or_stream is None:
            out_path_or_stream = sys.stdout.buffer

        if isinstance(out_path_or_stream, io.IOBase) or hasattr(out_path_or_stream, 'write'):
            return self.serialize(out_path_or_stream, end=end)
        else:
            path = os.fsdecode(out_path_or_stream)
            with open(path, 'wb') as stream:
                self.serialize(stream, end=end)
            logger.debug('saved %d records to %r', len(self), path)
            return self

    def serialize(self, stream: IO, end: AnyBytes = LINE_END.encode()) -> 'IhexFile':
        r"""Serializes records onto a byte stream.

        Args:
            stream (bytes IO):
                Stream to serialize records onto.

            end (bytes):
                Line terminator.

        Returns:
            :class:`IhexFile`: *self*.
        """

        for record in self._records:
            record.serialize(stream, end=end)
        return self

    def validate_records(self) -> 'IhexFile':
        r"""Validates the sequence of records.

        Each record must hold a consistent checksum, and there must be exactly
        one End Of File record, as the last one.

        Returns:
            :class:`IhexFile`: *self*.

        Raises:
            RecordError: Inconsistent sequence.

        Examples:
            >>> from ihexrec.file import IhexFile
            >>> IhexFile.parse(b':0100000041BE\n').validate_records()
            Traceback (most recent call last):
                ...
            ihexrec.base.RecordFormatError: missing end of file record
        """

        records = self._records
        last = len(records) - 1

        for index, record in enumerate(records):
            if not record.is_checksum_valid():
                error = ChecksumError(record.compute_checksum(), record.checksum)
                error.row = index + 1
                raise error

            if record.tag.is_eof() and index != last:
                error = RecordFormatError('end of file record not last')
                error.row = index + 1
                raise error

        if not records or not records[last].tag.is_eof():
            raise RecordFormatError('missing end of file record')

        return self


def load_records(path: AnyPath, ignore_errors: bool = False) -> List[IhexRecord]:
    r"""Loads records from a file.

    Args:
        path (str):
            Path of the file within the filesystem.

        ignore_errors (bool):
            Skip bad lines.

    Returns:
        list of :class:`IhexRecord`: Loaded records.
    """

    return IhexFile.load(path, ignore_errors=ignore_errors).records


def save_records(
    path: AnyPath,
    records: Iterable[IhexRecord],
    end: AnyBytes = LINE_END.encode(),
) -> None:
    r"""Saves records into a file.

    Args:
        path (str):
            Path of the file within the filesystem.

        records (:class:`IhexRecord` list):
            Records to save.

        end (bytes):
            Line terminator.
    """

    IhexFile.from_records(records).save(path, end=end)


@deprecated(reason='Use save_records() instead')
def write_records_to_file(
    dir_path: AnyPath,
    name: str,
    records: Iterable[IhexRecord],
) -> str:
    r"""Saves records into ``<dir_path>/<name>.hex``.

    Args:
        dir_path (str):
            Directory of the file.

        name (str):
            File name, without the ``.hex`` extension.

        records (:class:`IhexRecord` list):
            Records to save.

    Returns:
        str: Path of the saved file.
    """

    path = os.path.join(os.fsdecode(dir_path), name + '.hex')
    save_records(path, records)
    return path
