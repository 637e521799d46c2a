#!/usr/bin/env python3
"""
Name: cut
Description: select fields from each line of input
Author: Rich Lafferty, rich@alcor.concordia.ca (Original Perl Author)
License: perl
"""

import sys
import os
import argparse
import re
import fileinput
import locale
from collections import namedtuple
from enum import Enum

# An inclusive interval of 1-based field positions.
FieldRange = namedtuple('FieldRange', ['start', 'end'])

# Everything the line filter needs, fixed for the whole run. `fields` is the
# flattened form of `ranges`; None means cut_line works it out itself.
Config = namedtuple('Config', ['delimiter', 'require_delimiter', 'ranges', 'fields'],
                    defaults=('\t', False, (), None))

# Optional sign followed by ASCII digits only; int() alone would also take
# '1_000' and non-ASCII digits.
INT_RE = re.compile(r'[+-]?[0-9]+')

# Field numbers must fit a signed 64-bit integer.
INT_MIN, INT_MAX = -2**63, 2**63 - 1

class ErrorKind(Enum):
    EMPTY_SPECIFICATION = 'empty field list'
    MALFORMED_RANGE = 'invalid range format'
    INVALID_RANGE_BOUND = 'invalid range bound'
    RANGE_ORDER_VIOLATION = 'invalid decreasing range'
    INVALID_FIELD_NUMBER = 'invalid field number'
    NON_POSITIVE_FIELD = 'fields are numbered from 1'

class FieldListError(ValueError):
    """
    Raised when a field list can't be parsed. `kind` says which rule was
    broken, `token` is the offending list item (or bound) and `side` is
    'start' or 'end' for a bad range bound.
    """
    def __init__(self, kind, token=None, side=None):
        self.kind = kind
        self.token = token
        self.side = side
        super().__init__(str(self))

    def __str__(self):
        message = self.kind.value
        if self.side:
            message = f"{message} ({self.side})"
        if self.token is not None:
            message = f"{message} '{self.token}'"
        return message

def _to_int(text: str):
    """Returns the integer value of text, or None if it isn't one."""
    if not INT_RE.fullmatch(text):
        return None
    value = int(text)
    if not INT_MIN <= value <= INT_MAX:
        return None
    return value

def parse_field_list(list_str: str) -> list:
    """
    Parses a field list such as "1,3-5,7" into a list of FieldRange, in the
    order written. Overlaps and repeats are kept as-is.

    Raises FieldListError on the first bad item.
    """
    if not list_str.strip():
        raise FieldListError(ErrorKind.EMPTY_SPECIFICATION)

    ranges = []
    for part in list_str.split(','):
        part = part.strip()
        if not part: continue # Skip empty parts from stray commas

        if '-' in part:
            bounds = part.split('-')
            if len(bounds) != 2:
                raise FieldListError(ErrorKind.MALFORMED_RANGE, part)

            # Bounds are not checked against 1 here, unlike single fields.
            start_str, end_str = bounds[0].strip(), bounds[1].strip()
            start = _to_int(start_str)
            if start is None:
                raise FieldListError(ErrorKind.INVALID_RANGE_BOUND, start_str, 'start')
            end = _to_int(end_str)
            if end is None:
                raise FieldListError(ErrorKind.INVALID_RANGE_BOUND, end_str, 'end')
            if start > end:
                raise FieldListError(ErrorKind.RANGE_ORDER_VIOLATION, part)
            ranges.append(FieldRange(start, end))

        else:
            num = _to_int(part)
            if num is None:
                raise FieldListError(ErrorKind.INVALID_FIELD_NUMBER, part)
            if num < 1:
                raise FieldListError(ErrorKind.NON_POSITIVE_FIELD, part)
            ranges.append(FieldRange(num, num))

    return ranges

def flatten_ranges(ranges) -> list:
    """
    Expands ranges into single field numbers, keeping the first occurrence
    of each number in the order the ranges were given.
    """
    fields = []
    seen = set()
    for r in ranges:
        for i in range(r.start, r.end + 1):
            if i not in seen:
                seen.add(i)
                fields.append(i)
    return fields

def build_config(delimiter='\t', require_delimiter=False, ranges=()) -> Config:
    """Makes a Config with the field list flattened up front."""
    ranges = tuple(ranges)
    return Config(delimiter, require_delimiter, ranges, tuple(flatten_ranges(ranges)))

def cut_line(line: str, config: Config) -> tuple:
    """
    Selects the configured fields from one line (without its newline).

    Returns (output, emit). emit is False only when the line has no
    delimiter and config.require_delimiter is set.
    """
    delimiter = config.delimiter
    if config.require_delimiter and delimiter not in line:
        return '', False

    parts = line.split(delimiter)

    # No field list at all: the line goes out untouched.
    if not config.ranges:
        return line, True

    fields = config.fields
    if fields is None:
        fields = flatten_ranges(config.ranges)

    num_parts = len(parts)
    out_fields = []
    for i in fields:
        if 1 <= i <= num_parts:
            out_fields.append(parts[i-1]) # Convert 1-based index to 0-based

    return delimiter.join(out_fields), True

def chomp(line: str) -> str:
    """Removes one trailing '\\n' or '\\r\\n'."""
    if line.endswith('\n'):
        line = line[:-1]
    if line.endswith('\r'):
        line = line[:-1]
    return line

def cut_stream(stream, config: Config, out=None):
    """Runs every line of stream through cut_line, writing kept lines to out."""
    if out is None:
        out = sys.stdout
    for line in stream:
        output, emit = cut_line(chomp(line), config)
        if emit:
            out.write(output + '\n')

def non_empty(value: str) -> str:
    """argparse type for the delimiter option."""
    if not value:
        raise argparse.ArgumentTypeError("the delimiter must not be empty")
    return value

def main(argv=None):
    """Parses arguments, reads the field list and filters the input."""
    parser = argparse.ArgumentParser(
        description="Select fields from each line of input.",
        usage="%(prog)s [-f list] [-d delim] [-s] [file ...]"
    )
    parser.add_argument('-f', '--fields', dest='field_list', default='',
                        help='Output only these fields, e.g. 1,3-5. Without it, lines pass through whole.')
    parser.add_argument('-d', '--delimiter', default='\t', type=non_empty,
                        help="Use DELIM instead of TAB for field delimiter.")
    parser.add_argument('-s', '--only-delimited', action='store_true',
                        help='Suppress lines with no delimiter characters.')
    parser.add_argument('files', nargs='*', help='Files to process. Reads from stdin if none are given.')

    args = parser.parse_args(argv)
    program_name = os.path.basename(sys.argv[0])

    # The field list is parsed once, before any input is touched.
    ranges = []
    if args.field_list:
        try:
            ranges = parse_field_list(args.field_list)
        except FieldListError as e:
            print(f"{program_name}: {e}", file=sys.stderr)
            sys.exit(1)

    config = build_config(args.delimiter, args.only_delimited, ranges)

    # Bytes that don't decode are carried through to the output as-is,
    # whether they come from stdin or from a file.
    for std in (sys.stdin, sys.stdout):
        if hasattr(std, 'reconfigure'):
            std.reconfigure(errors='surrogateescape')
    openhook = fileinput.hook_encoded(locale.getpreferredencoding(False),
                                      errors='surrogateescape')

    try:
        with fileinput.input(files=args.files or ('-',), openhook=openhook) as stream:
            cut_stream(stream, config)
    except (BrokenPipeError, KeyboardInterrupt):
        sys.stderr.close() # Silence errors on broken pipe or Ctrl+C
        sys.exit(1)
    except FileNotFoundError as e:
        sys.stdout.flush()
        print(f"{program_name}: '{e.filename}': {e.strerror}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        sys.stdout.flush()
        print(f"{program_name}: read error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)

if __name__ == "__main__":
    main()
