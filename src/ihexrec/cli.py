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

"""
Module that contains the command line app.

Why does this file exist, and why not put this in __main__?

  You might be tempted to import things from __main__ later, but that will cause
  problems: the code will get executed twice:

  - When you run `python -m ihexrec` python will execute
    ``__main__.py`` as a script. That means there won't be any
    ``ihexrec.__main__`` in ``sys.modules``.
  - When you import __main__ it will get executed again (as a module) because
    there's no ``ihexrec.__main__`` in ``sys.modules``.

  Also see (1) from https://click.palletsprojects.com/en/stable/setuptools/#setuptools-integration
"""

import binascii
from typing import Optional

import click

from .__init__ import __version__
from .file import IhexFile
from .record import IhexRecord
from .utils import parse_int
from .utils import unhexlify


class BasedIntParamType(click.ParamType):
    name = 'integer'

    def convert(self, value, param, ctx):
        try:
            return parse_int(value)
        except ValueError:
            self.fail(f'invalid integer: {value!r}', param, ctx)


class ByteIntParamType(click.ParamType):
    name = 'byte'

    def convert(self, value, param, ctx):
        try:
            b = parse_int(value)
            if not 0 <= b <= 0xFF:
                raise ValueError()
            return b
        except ValueError:
            self.fail(f'invalid byte: {value!r}', param, ctx)


class WordIntParamType(click.ParamType):
    name = 'word'

    def convert(self, value, param, ctx):
        try:
            w = parse_int(value)
            if not 0 <= w <= 0xFFFF:
                raise ValueError()
            return w
        except ValueError:
            self.fail(f'invalid word: {value!r}', param, ctx)


BASED_INT = BasedIntParamType()
BYTE_INT = ByteIntParamType()
WORD_INT = WordIntParamType()

FILE_PATH_IN = click.Path(dir_okay=False, allow_dash=True, readable=True, exists=True)
FILE_PATH_OUT = click.Path(dir_okay=False, allow_dash=True, writable=True)


# ----------------------------------------------------------------------------

def print_version(ctx, _, value):

    if not value or ctx.resilient_parsing:
        return

    click.echo(str(__version__))
    ctx.exit()


def load_input(infile: Optional[str], ignore_errors: bool = False) -> IhexFile:

    if infile == '-':
        infile = None
    return IhexFile.load(infile, ignore_errors=ignore_errors)


# ============================================================================

@click.group()
@click.option('-V', '--version', is_flag=True, is_eager=True,
              expose_value=False, callback=print_version, help="""
    Prints the package version number.
""")
def main() -> None:
    """
    A set of command line utilities for Intel HEX records.

    Being built with `Click <https://click.palletsprojects.com/en/stable/>`_, all the
    commands follow POSIX-like syntax rules, as well as reserving the virtual
    file path ``-`` for command chaining via standard output/input buffering.
    """


# ----------------------------------------------------------------------------

@main.command()
@click.option('-c', '--count', type=BYTE_INT, help="""
    Byte count field.
    By default it is the length of DATA.
""")
@click.option('-a', '--address', type=WORD_INT, default=0, show_default=True, help="""
    16-bit address field.
""")
@click.option('-t', '--type', 'record_type', type=BYTE_INT, default=0, show_default=True, help="""
    Record type field.
""")
@click.argument('data', default='')
def build(
    count: Optional[int],
    address: int,
    record_type: int,
    data: str,
) -> None:
    r"""Builds a single record.

    ``DATA`` is the hexadecimal representation of the data bytes; spaces,
    dots, dashes, and colons are ignored.
    """

    try:
        data_bytes = unhexlify(data.encode('ascii'), delete=...)
    except (binascii.Error, UnicodeEncodeError):
        raise click.BadParameter(f'invalid hex data: {data!r}', param_hint='DATA') from None

    if count is None:
        count = len(data_bytes)

    record = IhexRecord.build(count, address >> 8, address & 0xFF, record_type, data_bytes)
    click.echo(record.render())


# ----------------------------------------------------------------------------

@main.command()
@click.option('--ignore-errors', is_flag=True, help="""
    Skips records with errors.
""")
@click.argument('infile', type=FILE_PATH_IN, required=False)
def info(
    ignore_errors: bool,
    infile: Optional[str],
) -> None:
    r"""Describes each record of a file.

    ``INFILE`` is the path of the input file.
    Set to ``-`` to read from standard input.
    """

    input_file = load_input(infile, ignore_errors=ignore_errors)

    for index, record in enumerate(input_file):
        if index:
            click.echo()
        click.echo(record.describe())


# ----------------------------------------------------------------------------

@main.command()
@click.argument('infile', type=FILE_PATH_IN, required=False)
@click.argument('outfile', type=FILE_PATH_OUT, required=False)
def normalize(
    infile: Optional[str],
    outfile: Optional[str],
) -> None:
    r"""Rewrites records in canonical form.

    Hexadecimal digits are made uppercase, blank lines are removed, and each
    line is terminated by ``CR LF``.

    ``INFILE`` is the path of the input file.
    Set to ``-`` to read from standard input.

    ``OUTFILE`` is the path of the output file.
    Set to ``-`` to write to standard output.
    Leave empty to overwrite ``INFILE``.
    """

    if not outfile:
        outfile = infile
    if outfile == '-':
        outfile = None

    input_file = load_input(infile)
    input_file.save(outfile)


# ----------------------------------------------------------------------------

@main.command(name='print')
@click.option('--color', is_flag=True, help="""
    Colorizes the record fields.
""")
@click.option('--ignore-errors', is_flag=True, help="""
    Skips records with errors.
""")
@click.argument('infile', type=FILE_PATH_IN, required=False)
def print_(
    color: bool,
    ignore_errors: bool,
    infile: Optional[str],
) -> None:
    r"""Prints the records of a file.

    ``INFILE`` is the path of the input file.
    Set to ``-`` to read from standard input.
    """

    input_file = load_input(infile, ignore_errors=ignore_errors)
    stream = click.get_binary_stream('stdout')

    for record in input_file:
        record.print(stream=stream, color=color, end=b'\n')
    stream.flush()


# ----------------------------------------------------------------------------

@main.command()
@click.option('--ignore-errors', is_flag=True, help="""
    Skips records with errors.
""")
@click.option('--strict', is_flag=True, help="""
    Also requires a single End Of File record, as the last one.
""")
@click.argument('infile', type=FILE_PATH_IN, required=False)
def validate(
    ignore_errors: bool,
    strict: bool,
    infile: Optional[str],
) -> None:
    r"""Validates a record file.

    ``INFILE`` is the path of the input file.
    Set to ``-`` to read from standard input.
    """

    input_file = load_input(infile, ignore_errors=ignore_errors)

    if strict:
        input_file.validate_records()
