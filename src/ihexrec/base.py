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

r"""Base types, errors, and token colorization."""

import os
from typing import Any
from typing import Mapping
from typing import Optional
from typing import Type
from typing import Union

import colorama

try:
    from typing import TypeAlias
except ImportError:  # pragma: no cover
    TypeAlias = Any  # Python < 3.10

AnyBytes: TypeAlias = Union[bytes, bytearray, memoryview]
AnyPath: TypeAlias = Union[bytes, bytearray, str, os.PathLike]
EllipsisType: TypeAlias = Type['Ellipsis']

TOKEN_COLOR_CODES: Mapping[str, bytes] = {
    '':         colorama.Style.RESET_ALL.encode(),
    '<':        colorama.Style.RESET_ALL.encode(),
    '>':        colorama.Style.RESET_ALL.encode(),
    'address':  colorama.Fore.RED.encode(),
    'begin':    colorama.Fore.YELLOW.encode(),
    'checksum': colorama.Fore.MAGENTA.encode(),
    'count':    colorama.Fore.BLUE.encode(),
    'data':     colorama.Fore.CYAN.encode(),
    'dataalt':  colorama.Fore.LIGHTCYAN_EX.encode(),
    'end':      colorama.Style.RESET_ALL.encode(),
    'tag':      colorama.Fore.GREEN.encode(),
}
r"""ANSI color codes for each possible token type."""


class RecordError(ValueError):
    r"""Generic record error.

    Base class of all the errors raised while parsing or building a record.
    It inherits from :class:`ValueError`, so that callers catching plain
    value errors keep working.

    Attributes:
        row (int):
            Line number (1-based) of the offending record within a file, if
            known; ``None`` otherwise.
    """

    def __init__(self, message: str):

        super().__init__(message)
        self.message: str = message
        self.row: Optional[int] = None

    def __str__(self) -> str:

        if self.row is None:
            return self.message
        return f'line {self.row}: {self.message}'


class RecordFormatError(RecordError):
    r"""Structural record error.

    Raised when a line does not follow the record syntax: missing colon,
    non-hexadecimal characters, too few characters for the declared byte
    count, or when the byte count of a record being built does not match its
    data.

    Attributes:
        char (str):
            Offending character, if any.

        index (int):
            Index of the offending character within the line, if any.
    """

    def __init__(
        self,
        message: str,
        char: Optional[str] = None,
        index: Optional[int] = None,
    ):

        super().__init__(message)
        self.char: Optional[str] = char
        self.index: Optional[int] = index

    @classmethod
    def invalid_char(cls, char: str, index: int) -> 'RecordFormatError':
        r"""Creates an error for a non-hexadecimal character.

        Args:
            char (str):
                Offending character.

            index (int):
                Index of `char` within the line.

        Returns:
            :class:`RecordFormatError`: Error object.

        Examples:
            >>> from ihexrec.base import RecordFormatError
            >>> str(RecordFormatError.invalid_char('G', 5))
            "invalid character 'G' at index 5"
        """

        return cls(f'invalid character {char!r} at index {index}', char=char, index=index)


class ChecksumError(RecordError):
    r"""Checksum mismatch.

    Raised only after a successful field extraction, when the checksum
    computed from the record fields differs from the one within the line.

    Attributes:
        expected (int):
            Computed checksum.

        actual (int):
            Checksum found within the line.
    """

    def __init__(self, expected: int, actual: int):

        super().__init__(f'wrong checksum: expected 0x{expected:02X}, actual 0x{actual:02X}')
        self.expected: int = expected
        self.actual: int = actual


def colorize_tokens(
    tokens: Mapping[str, bytes],
    altdata: bool = True,
) -> Mapping[str, bytes]:
    r"""Prepends ANSI color codes to record field tokens.

    For each token within `tokens`, its key is used to look up the ANSI color
    code from :data:`TOKEN_COLOR_CODES`.
    The retrieved code (byte string) is prepended to the token.
    All the modified tokens are then collected and returned.

    Args:
        tokens (dict):
            A mapping of each token key name to token byte string.

        altdata (bool):
            If true, it alternates each byte (two hex digits) between the ANSI
            color codes mapped with keys ``data`` (even byte index) and
            ``dataalt`` (odd byte index).
            If false, only the ``data`` code is prepended.

    Returns:
        dict: `tokens` with prepended ANSI color codes.

    Examples:
        >>> from ihexrec.base import colorize_tokens
        >>> from ihexrec.record import IhexRecord
        >>> from pprint import pprint

        >>> record = IhexRecord.create_end_of_file()
        >>> colorized = colorize_tokens(record.to_tokens())
        >>> pprint(colorized)  # doctest: +NORMALIZE_WHITESPACE
        {'<': b'\x1b[0m',
         '>': b'\x1b[0m',
         'address': b'\x1b[31m0000',
         'begin': b'\x1b[33m:',
         'checksum': b'\x1b[35mFF',
         'count': b'\x1b[34m00',
         'end': b'\x1b[0m\r\n',
         'tag': b'\x1b[32m01'}
    """

    codes = TOKEN_COLOR_CODES
    colorized = {}
    colorized.setdefault('<', codes['<'])

    for key, value in tokens.items():
        if key not in codes:
            key = ''
        if value:
            code = codes[key]

            if key == 'data' and altdata:
                altcode = codes['dataalt']
                buffer = bytearray()

                for i in range(0, len(value), 2):
                    buffer.extend(altcode if i & 2 else code)
                    buffer.extend(value[i:(i + 2)])

                colorized[key] = bytes(buffer)
            else:
                colorized[key] = code + value

    colorized.setdefault('>', codes['>'])
    return colorized
