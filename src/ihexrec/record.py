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

r"""Intel HEX record codec.

A record is a single line of text::

    :BBAAAARRDD...DDCC

where ``BB`` is the byte count, ``AAAA`` the big-endian 16-bit address,
``RR`` the record type, ``DD...DD`` the data bytes, and ``CC`` the checksum.

See Also:
    `<https://en.wikipedia.org/wiki/Intel_HEX>`_
"""

import enum
import sys
from typing import IO
from typing import Any
from typing import Iterable
from typing import Mapping
from typing import MutableMapping
from typing import Optional
from typing import Tuple
from typing import Union

from .base import AnyBytes
from .base import ChecksumError
from .base import RecordFormatError
from .base import colorize_tokens
from .utils import HEX_DIGITS
from .utils import hexlify
from .utils import unhex_pair

try:
    from typing import Literal
    ByteOrder = Literal['big', 'little']
except ImportError:  # pragma: no cover
    ByteOrder = str  # Python < 3.8

AnyData = Union[AnyBytes, Iterable[int], None]


class IhexTag(enum.IntEnum):
    r"""Intel HEX record type.

    Any 8-bit value not listed here is still accepted: it becomes an *unknown*
    pseudo-member, which keeps its raw numeric value.

    Examples:
        >>> from ihexrec.record import IhexTag
        >>> IhexTag(1)
        <IhexTag.END_OF_FILE: 1>
        >>> tag = IhexTag(0x42)
        >>> tag == 0x42, tag.is_known()
        (True, False)
    """

    DATA = 0
    r"""Binary data."""

    END_OF_FILE = 1
    r"""End Of File."""

    EXTENDED_SEGMENT_ADDRESS = 2
    r"""Extended Segment Address."""

    START_SEGMENT_ADDRESS = 3
    r"""Start Segment Address."""

    EXTENDED_LINEAR_ADDRESS = 4
    r"""Extended Linear Address."""

    START_LINEAR_ADDRESS = 5
    r"""Start Linear Address."""

    @classmethod
    def _missing_(cls, value: Any) -> Optional['IhexTag']:

        if isinstance(value, int) and 0 <= value <= 0xFF:
            member = int.__new__(cls, value)
            member._name_ = f'UNKNOWN_{value:02X}'
            member._value_ = value
            return member
        return None

    def is_data(self) -> bool:

        return self == IhexTag.DATA

    def is_eof(self) -> bool:
        r"""Tells whether this is an End Of File record tag.

        Returns:
            bool: This is an End Of File record tag.

        Examples:
            >>> from ihexrec.record import IhexTag
            >>> IhexTag.END_OF_FILE.is_eof()
            True
            >>> IhexTag.DATA.is_eof()
            False
        """

        return self == IhexTag.END_OF_FILE

    def is_extension(self) -> bool:
        r"""Tells whether this is an Extended Address record tag.

        Returns:
            bool: This is an Extended Address record tag.
        """

        return (self == IhexTag.EXTENDED_LINEAR_ADDRESS or
                self == IhexTag.EXTENDED_SEGMENT_ADDRESS)

    def is_file_termination(self) -> bool:

        return self.is_eof()

    def is_known(self) -> bool:
        r"""Tells whether this is one of the standard record types.

        Returns:
            bool: This tag is not an *unknown* pseudo-member.
        """

        return self.name in type(self).__members__

    def is_start(self) -> bool:
        r"""Tells whether this is a Start Address record tag.

        Returns:
            bool: This is a Start Address record tag.
        """

        return (self == IhexTag.START_LINEAR_ADDRESS or
                self == IhexTag.START_SEGMENT_ADDRESS)


def compute_checksum(
    byte_count: int,
    address_high: int,
    address_low: int,
    record_type: int,
    data: Optional[Iterable[int]] = None,
) -> int:
    r"""Computes the checksum of record fields.

    The checksum is the two's complement of the 8-bit sum of all the other
    fields, so that the sum of all the record bytes, checksum included, is
    zero modulo 256.

    Args:
        byte_count (int):
            Byte count field.

        address_high (int):
            Most significant address byte.

        address_low (int):
            Least significant address byte.

        record_type (int):
            Record type field.

        data (bytes):
            Data bytes; ``None`` counts as empty.

    Returns:
        int: Checksum byte.

    Examples:
        >>> from ihexrec.record import compute_checksum
        >>> hex(compute_checksum(0x00, 0x00, 0x00, 0x01))
        '0xff'
        >>> hex(compute_checksum(0x03, 0x00, 0x30, 0x00, b'\x02\x33\x7A'))
        '0x1e'
    """

    total = byte_count + address_high + address_low + record_type
    if data is not None:
        total += sum(data)
    return (0x100 - (total & 0xFF)) & 0xFF


def _check_byte(value: int, name: str) -> int:

    value = value.__index__()
    if not 0 <= value <= 0xFF:
        raise RecordFormatError(f'{name} overflow')
    return value


def _to_data(data: AnyData) -> bytes:

    if data is None:
        return b''
    if isinstance(data, int):
        raise TypeError('data must be a sequence of bytes')
    try:
        return bytes(data)
    except ValueError:
        raise RecordFormatError('data byte overflow') from None


class IhexRecord:
    r"""Intel HEX record object.

    Records are immutable: they are validated once, upon creation, and any
    attempt to change their attributes raises :class:`AttributeError`.

    There are two ways to create a record:

    * :meth:`parse` decodes a line of text, checking its syntax and its
      checksum;
    * :meth:`build` (or the constructor, or the ``create_*`` factories)
      computes the checksum and the canonical text from the provided fields.

    Args:
        byte_count (int):
            Number of data bytes; it must match the length of `data`.

        address_high (int):
            Most significant byte of the 16-bit address field.

        address_low (int):
            Least significant byte of the 16-bit address field.

        record_type (int):
            Record type; unknown values are stored as they are.

        data (bytes):
            Data bytes; ``None`` is the same as empty.

    Raises:
        RecordFormatError: Field overflow, or `byte_count` does not match the
            length of `data`.

    Examples:
        >>> from ihexrec.record import IhexRecord
        >>> record = IhexRecord(0x00, 0x00, 0x00, 0x01)
        >>> record.text
        ':00000001FF'
    """

    __slots__ = (
        '_byte_count',
        '_address_high',
        '_address_low',
        '_record_type',
        '_data',
        '_checksum',
        '_text',
    )

    Tag = IhexTag

    def __init__(
        self,
        byte_count: int,
        address_high: int,
        address_low: int,
        record_type: int,
        data: AnyData = None,
    ):

        byte_count = _check_byte(byte_count, 'byte count')
        address_high = _check_byte(address_high, 'address high')
        address_low = _check_byte(address_low, 'address low')
        record_type = _check_byte(record_type, 'record type')
        data = _to_data(data)

        if byte_count != len(data):
            raise RecordFormatError('byteCount does not match length of dataSequence')

        checksum = compute_checksum(byte_count, address_high, address_low, record_type, data)
        self._assign(byte_count, address_high, address_low, record_type, data, checksum, None)

    def __bytes__(self) -> bytes:

        return self.to_bytestr()

    def __delattr__(self, name: str) -> None:

        raise AttributeError(f'{type(self).__name__} is immutable')

    def __eq__(self, other: Any) -> bool:

        if not isinstance(other, IhexRecord):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:

        return hash(self._key())

    def __ne__(self, other: Any) -> bool:

        if not isinstance(other, IhexRecord):
            return NotImplemented
        return self._key() != other._key()

    def __repr__(self) -> str:

        meta = self.get_meta()
        text = f'<{self.__class__!s} @0x{id(self):08X} '
        text += ' '.join(f'{key!s}:={value!r}' for key, value in meta.items())
        text += '>'
        return text

    def __setattr__(self, name: str, value: Any) -> None:

        raise AttributeError(f'{type(self).__name__} is immutable')

    def __str__(self) -> str:

        return self.render()

    def _assign(
        self,
        byte_count: int,
        address_high: int,
        address_low: int,
        record_type: int,
        data: bytes,
        checksum: int,
        text: Optional[str],
    ) -> None:

        setter = object.__setattr__
        setter(self, '_byte_count', byte_count)
        setter(self, '_address_high', address_high)
        setter(self, '_address_low', address_low)
        setter(self, '_record_type', IhexTag(record_type))
        setter(self, '_data', data)
        setter(self, '_checksum', checksum)
        setter(self, '_text', self.render() if text is None else text)

    def _key(self) -> Tuple[int, int, int, int, bytes, int]:

        return (self._byte_count, self._address_high, self._address_low,
                int(self._record_type), self._data, self._checksum)

    @property
    def address(self) -> int:
        r"""int: 16-bit address, built from the two address bytes."""

        return (self._address_high << 8) | self._address_low

    @property
    def address_high(self) -> int:
        r"""int: Most significant byte of the address field."""

        return self._address_high

    @property
    def address_low(self) -> int:
        r"""int: Least significant byte of the address field."""

        return self._address_low

    @classmethod
    def build(
        cls,
        byte_count: int,
        address_high: int,
        address_low: int,
        record_type: int,
        data: AnyData = None,
    ) -> 'IhexRecord':
        r"""Builds a record from its fields.

        The checksum is computed, and the canonical text is rendered.

        Args:
            byte_count (int):
                Number of data bytes; it must match the length of `data`.

            address_high (int):
                Most significant byte of the 16-bit address field.

            address_low (int):
                Least significant byte of the 16-bit address field.

            record_type (int):
                Record type.

            data (bytes):
                Data bytes; ``None`` is the same as empty.

        Returns:
            :class:`IhexRecord`: Record object.

        Raises:
            RecordFormatError: Field overflow, or `byte_count` does not match
                the length of `data`.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> IhexRecord.build(0x02, 0x12, 0x34, 0x00, b'\xAB\xCD').text
            ':02123400ABCD40'
        """

        return cls(byte_count, address_high, address_low, record_type, data)

    @property
    def byte_count(self) -> int:
        r"""int: Number of data bytes."""

        return self._byte_count

    @property
    def checksum(self) -> int:
        r"""int: Checksum byte."""

        return self._checksum

    def compute_checksum(self) -> int:
        r"""Computes the checksum from the record fields.

        Returns:
            int: Computed checksum.

        See Also:
            :func:`compute_checksum`
        """

        return compute_checksum(self._byte_count, self._address_high, self._address_low,
                                self._record_type, self._data)

    @classmethod
    def create_data(
        cls,
        address: int,
        data: AnyData,
    ) -> 'IhexRecord':
        r"""Creates a Data record.

        Args:
            address (int):
                16-bit address.

            data (bytes):
                Data bytes, up to 255.

        Returns:
            :class:`IhexRecord`: Data record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_data(0x1234, b'abc'))
            ':0312340061626391'
        """

        address = address.__index__()
        if not 0 <= address <= 0xFFFF:
            raise RecordFormatError('address overflow')

        data = _to_data(data)
        if len(data) > 0xFF:
            raise RecordFormatError('data size overflow')

        return cls(len(data), address >> 8, address & 0xFF, IhexTag.DATA, data)

    @classmethod
    def create_end_of_file(cls) -> 'IhexRecord':
        r"""Creates an End Of File record.

        Returns:
            :class:`IhexRecord`: End Of File record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_end_of_file())
            ':00000001FF'
        """

        return cls(0, 0, 0, IhexTag.END_OF_FILE)

    @classmethod
    def create_extended_linear_address(cls, extension: int) -> 'IhexRecord':
        r"""Creates an Extended Linear Address record.

        Args:
            extension (int):
                Upper 16 bits of the linear address.

        Returns:
            :class:`IhexRecord`: Extended Linear Address record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_extended_linear_address(0x1234))
            ':020000041234B4'
        """

        return cls._create_extension(IhexTag.EXTENDED_LINEAR_ADDRESS, extension)

    @classmethod
    def create_extended_segment_address(cls, extension: int) -> 'IhexRecord':
        r"""Creates an Extended Segment Address record.

        Args:
            extension (int):
                Segment base, in 16-byte paragraphs.

        Returns:
            :class:`IhexRecord`: Extended Segment Address record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_extended_segment_address(0x1234))
            ':020000021234B6'
        """

        return cls._create_extension(IhexTag.EXTENDED_SEGMENT_ADDRESS, extension)

    @classmethod
    def create_start_linear_address(cls, address: int) -> 'IhexRecord':
        r"""Creates a Start Linear Address record.

        Args:
            address (int):
                32-bit start address.

        Returns:
            :class:`IhexRecord`: Start Linear Address record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_start_linear_address(0x12345678))
            ':0400000512345678E3'
        """

        return cls._create_start(IhexTag.START_LINEAR_ADDRESS, address)

    @classmethod
    def create_start_segment_address(cls, address: int) -> 'IhexRecord':
        r"""Creates a Start Segment Address record.

        Args:
            address (int):
                ``CS:IP`` pair, as a 32-bit value.

        Returns:
            :class:`IhexRecord`: Start Segment Address record object.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> str(IhexRecord.create_start_segment_address(0x12345678))
            ':0400000312345678E5'
        """

        return cls._create_start(IhexTag.START_SEGMENT_ADDRESS, address)

    @classmethod
    def _create_extension(cls, tag: IhexTag, extension: int) -> 'IhexRecord':

        extension = extension.__index__()
        if not 0 <= extension <= 0xFFFF:
            raise RecordFormatError('extension overflow')

        data = extension.to_bytes(2, byteorder='big')
        return cls(len(data), 0, 0, tag, data)

    @classmethod
    def _create_start(cls, tag: IhexTag, address: int) -> 'IhexRecord':

        address = address.__index__()
        if not 0 <= address <= 0xFFFFFFFF:
            raise RecordFormatError('address overflow')

        data = address.to_bytes(4, byteorder='big')
        return cls(len(data), 0, 0, tag, data)

    @property
    def data(self) -> bytes:
        r"""bytes: Data bytes."""

        return self._data

    def data_to_int(
        self,
        byteorder: ByteOrder = 'big',
        signed: bool = False,
    ) -> int:
        r"""Interprets data bytes as integer.

        Args:
            byteorder ('big' or 'little'):
                Byte order (endianness): either ``'big'`` (default) or
                ``'little'``.

            signed (bool):
                Signed integer (2-complement); default false.

        Returns:
            int: Interpreted integer value.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> record = IhexRecord.create_extended_linear_address(0xABCD)
            >>> hex(record.data_to_int())
            '0xabcd'
        """

        return int.from_bytes(self._data, byteorder=byteorder, signed=signed)

    def describe(self) -> str:
        r"""Describes the record fields, for human reading.

        Returns:
            str: Multi-line description, one field per line, then one line per
            data byte.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> print(IhexRecord.create_data(0x0010, b'\x0C').describe())
            Record: :010010000CE3
            Byte Count: 01
            Address High: 00
            Address Low: 10
            Record Type: 00 (DATA)
            Checksum: E3
            Data Bytes: 1
            Byte 000: 0C
        """

        lines = [
            f'Record: {self._text}',
            f'Byte Count: {self._byte_count:02X}',
            f'Address High: {self._address_high:02X}',
            f'Address Low: {self._address_low:02X}',
            f'Record Type: {self._record_type:02X} ({self._record_type.name})',
            f'Checksum: {self._checksum:02X}',
            f'Data Bytes: {len(self._data)}',
        ]
        lines.extend(f'Byte {i:03d}: {b:02X}' for i, b in enumerate(self._data))
        return '\n'.join(lines)

    def get_meta(self) -> MutableMapping[str, Any]:
        r"""Gets meta information.

        Returns:
             dict: Field values, by name.
        """

        return {
            'address_high': self._address_high,
            'address_low': self._address_low,
            'byte_count': self._byte_count,
            'checksum': self._checksum,
            'data': self._data,
            'record_type': self._record_type,
            'text': self._text,
        }

    def is_checksum_valid(self) -> bool:
        r"""Tells whether the stored checksum matches the record fields.

        This is always true, unless the record was parsed with validation
        disabled.

        Returns:
            bool: Consistent checksum.
        """

        return self._checksum == self.compute_checksum()

    @classmethod
    def parse(
        cls,
        line: Union[str, AnyBytes],
        validate: bool = True,
    ) -> 'IhexRecord':
        r"""Parses a record from a line of text.

        The line must not contain the line terminator.
        Byte strings are decoded one byte per character (Latin-1).

        The checks are performed in this order, stopping at the first failure:

        #. every character after the first one must be a hexadecimal digit;
        #. the line must start with a colon, and contain exactly the number
           of characters required by its byte count;
        #. the checksum must match the one computed from the fields.

        Args:
            line (str):
                Line of text to parse.

            validate (bool):
                Perform the checksum check. Syntax checks are always
                performed.

        Returns:
            :class:`IhexRecord`: Parsed record, whose :attr:`text` is `line`.

        Raises:
            RecordFormatError: Syntax error.
            ChecksumError: Checksum mismatch.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> record = IhexRecord.parse(':0300300002337a1e')
            >>> record.data, hex(record.address), record.text
            (b'\x023z', '0x30', ':0300300002337a1e')
            >>> IhexRecord.parse(':00000001FE')
            Traceback (most recent call last):
                ...
            ihexrec.base.ChecksumError: wrong checksum: expected 0xFF, actual 0xFE
        """

        if isinstance(line, (bytes, bytearray, memoryview)):
            line = bytes(line).decode('latin-1')

        for index in range(1, len(line)):
            char = line[index]
            if char not in HEX_DIGITS:
                raise RecordFormatError.invalid_char(char, index)

        if not line:
            raise RecordFormatError('record too short')

        if line[0] != ':':
            raise RecordFormatError('record must start with colon ":"', char=line[0], index=0)

        try:
            byte_count = unhex_pair(line[1], line[2])
            address_high = unhex_pair(line[3], line[4])
            address_low = unhex_pair(line[5], line[6])
            record_type = unhex_pair(line[7], line[8])

            index = 9
            data = bytearray()
            for _ in range(byte_count):
                data.append(unhex_pair(line[index], line[index + 1]))
                index += 2

            checksum = unhex_pair(line[index], line[index + 1])
            index += 2

        except IndexError:
            raise RecordFormatError('record too short for its byte count') from None

        if index != len(line):
            raise RecordFormatError('trailing characters after checksum', index=index)

        data = bytes(data)
        if validate:
            expected = compute_checksum(byte_count, address_high, address_low, record_type, data)
            if checksum != expected:
                raise ChecksumError(expected, checksum)

        record = cls.__new__(cls)
        record._assign(byte_count, address_high, address_low, record_type, data, checksum, line)
        return record

    def print(
        self,
        stream: Optional[IO] = None,
        color: bool = False,
        end: AnyBytes = b'\r\n',
    ) -> 'IhexRecord':
        r"""Prints a record.

        The record is converted into tokens (eventually colorized) then joined
        and written onto a byte stream (*stdout* by default).

        Args:
            stream (bytes IO):
                The byte stream where the record tokens are printed.
                If ``None``, *stdout* is selected.

            color (bool):
                Tokens are colorized before printing.

            end (bytes):
                Line terminator.

        Returns:
            :class:`IhexRecord`: *self*.

        See Also:
            :meth:`to_tokens`
            :func:`ihexrec.base.colorize_tokens`
        """

        if stream is None:
            stream = sys.stdout.buffer
        tokens = self.to_tokens(end=end)
        if color:
            tokens = colorize_tokens(tokens)
        stream.writelines(tokens.values())
        return self

    @property
    def record_type(self) -> IhexTag:
        r""":class:`IhexTag`: Record type."""

        return self._record_type

    def render(self) -> str:
        r"""Renders the canonical text of the record.

        Each field is written as an uppercase two-digit hexadecimal number,
        in field order, prefixed with a colon.
        Parsed lowercase records are rendered in uppercase.

        Returns:
            str: Canonical text, without line terminator.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> IhexRecord.parse(':0300300002337a1e').render()
            ':0300300002337A1E'
        """

        return ':%02X%02X%02X%02X%s%02X' % (
            self._byte_count,
            self._address_high,
            self._address_low,
            self._record_type,
            hexlify(self._data).decode('ascii'),
            self._checksum,
        )

    def serialize(self, stream: IO, end: AnyBytes = b'\r\n') -> 'IhexRecord':
        r"""Serializes onto a byte stream.

        Args:
            stream (:class:`io.IOBase`):
                Stream to write.

            end (bytes):
                Line terminator.

        Returns:
            :class:`IhexRecord`: *self*.
        """

        stream.write(self.to_bytestr(end=end))
        return self

    @property
    def tag(self) -> IhexTag:
        r""":class:`IhexTag`: Alias of :attr:`record_type`."""

        return self._record_type

    @property
    def text(self) -> str:
        r"""str: Text of the record, as parsed or as built."""

        return self._text

    def to_bytestr(self, end: AnyBytes = b'\r\n') -> bytes:
        r"""Converts into a byte string.

        Args:
            end (bytes):
                Line terminator.

        Returns:
            bytes: Canonical rendering, followed by `end`.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> IhexRecord.create_data(0x1234, b'abc').to_bytestr(end=b'\n')
            b':0312340061626391\n'
        """

        return self.render().encode('ascii') + bytes(end)

    def to_tokens(self, end: AnyBytes = b'\r\n') -> Mapping[str, bytes]:
        r"""Converts into byte string tokens.

        Args:
            end (bytes):
                Line terminator.

        Returns:
            dict: Mapping of token keys to token byte strings.

        Examples:
            >>> from ihexrec.record import IhexRecord
            >>> record = IhexRecord.create_data(0x1234, b'abc')
            >>> record.to_tokens(end=b'\n')  # doctest:+NORMALIZE_WHITESPACE
            {'begin': b':', 'count': b'03', 'address': b'1234', 'tag': b'00',
             'data': b'616263', 'checksum': b'91', 'end': b'\n'}
        """

        return {
            'begin': b':',
            'count': b'%02X' % self._byte_count,
            'address': b'%02X%02X' % (self._address_high, self._address_low),
            'tag': b'%02X' % self._record_type,
            'data': hexlify(self._data),
            'checksum': b'%02X' % self._checksum,
            'end': bytes(end),
        }
