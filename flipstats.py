'''
flipstats.py

Purpose:
    Command-line front end for flips.py. Checks swap lists, finds shortest
    flip sequences, reports flip distances and counts similar substring pairs
    for strings given on the command line, in a file, or on stdin.

Usage:
    python flipstats.py check abc bca 0,1 1,2
    python flipstats.py sequence abc,bca cat,dog
    python flipstats.py distance --input pairs.csv --format json
    python flipstats.py count abcab --max-dist 2
    python flipstats.py --config flipstats.yaml count --input words.txt
'''

import argparse
import contextlib
import csv
import io
import json
import logging
import math
import os
import sys
from typing import Any, Iterable, Mapping, MutableMapping, Sequence, TextIO

import chardet
import yaml

import flips


class MinimalFormatter(logging.Formatter):
    """A logging formatter that removes prefixes for INFO level messages."""

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{record.levelname}: {record.getMessage()}"


class ConfigError(Exception):
    """Raised when a configuration file is invalid."""


OUTPUT_FORMATS = ('arrow', 'json', 'csv', 'yaml')

DEFAULT_CONFIG: dict[str, Any] = {
    'max_dist': 1,
    'length': None,
    'output_format': 'arrow',
    'output_file': '-',
    'delimiter': ',',
}

MODE_DETAILS = {
    'check': {
        'summary': 'Check that a list of flips turns one string into another.',
        'example': 'python flipstats.py check abc bca 0,1 1,2',
    },
    'sequence': {
        'summary': 'Find a shortest list of flips between pairs of strings.',
        'example': 'python flipstats.py sequence abc,bca --format json',
    },
    'distance': {
        'summary': 'Report the flip distance between pairs of strings.',
        'example': 'python flipstats.py distance --input pairs.csv',
    },
    'count': {
        'summary': 'Count distinct substring pairs within a flip distance.',
        'example': 'python flipstats.py count abcab --max-dist 2',
    },
}


def _merge_defaults(config: MutableMapping[str, Any], defaults: Mapping[str, Any]) -> None:
    """Fill in default values for keys missing from the configuration."""
    for key, default_value in defaults.items():
        if key not in config:
            logging.debug(f"Applying default for '{key}': {default_value}")
        config.setdefault(key, default_value)


def validate_config(config: Mapping[str, Any]) -> None:
    """Raise ConfigError describing every problem found in *config*."""
    errors = []

    max_dist = config.get('max_dist')
    if isinstance(max_dist, bool) or not isinstance(max_dist, int) or max_dist < 0:
        errors.append("'max_dist' must be a non-negative integer.")

    length = config.get('length')
    if length is not None and (isinstance(length, bool) or not isinstance(length, int) or length < 2):
        errors.append("'length' must be an integer of at least 2 if provided.")

    if config.get('output_format') not in OUTPUT_FORMATS:
        errors.append(f"'output_format' must be one of: {', '.join(OUTPUT_FORMATS)}.")

    if not isinstance(config.get('output_file'), str) or not config.get('output_file'):
        errors.append("'output_file' must be a non-empty string.")

    if not isinstance(config.get('delimiter'), str) or not config.get('delimiter'):
        errors.append("'delimiter' must be a non-empty string.")

    if errors:
        raise ConfigError(" ".join(errors))


def load_config(config_path: str | None) -> dict[str, Any]:
    """
    Load the YAML configuration file and merge it over DEFAULT_CONFIG.

    A *config_path* of None skips the file and returns the defaults.
    """
    config: dict[str, Any] = {}
    if config_path is not None:
        with open(config_path, 'r', encoding='utf-8') as file:
            config = yaml.safe_load(file)
        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file '{config_path}' is empty or malformed.")
        logging.debug(f"Parsed YAML configuration from '{config_path}'.")

    _merge_defaults(config, DEFAULT_CONFIG)
    validate_config(config)
    return config


def detect_encoding(file_path: str) -> str | None:
    """Attempt to detect a file's encoding using chardet."""
    with open(file_path, 'rb') as f:
        raw_data = f.read()
    result = chardet.detect(raw_data)
    encoding = result.get('encoding')
    confidence = result.get('confidence') or 0
    if encoding and confidence > 0.5:
        logging.info(
            "Detected encoding '%s' for '%s' (confidence %.2f)",
            encoding,
            file_path,
            confidence,
        )
        return encoding

    logging.warning("Failed to reliably detect encoding for '%s'.", file_path)
    return None


def read_lines(file_path: str) -> list[str]:
    """
    Read non-blank, stripped lines from *file_path* ('-' reads stdin).

    Tries UTF-8, then whatever chardet detects with confidence, then latin1.
    latin1 decodes any byte sequence, so it has to come last.
    """
    if file_path == '-':
        lines = sys.stdin.readlines()
    else:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                lines = f.readlines()
        except UnicodeDecodeError:
            logging.warning("UTF-8 decoding failed for '%s'. Detecting encoding...", file_path)
            enc = detect_encoding(file_path)
            if enc:
                try:
                    with open(file_path, 'r', encoding=enc) as f:
                        lines = f.readlines()
                except (UnicodeDecodeError, LookupError):
                    logging.warning(f"Failed with detected encoding {enc}.")
                    enc = None
            if not enc:
                logging.warning("Falling back to latin1 for '%s'.", file_path)
                with open(file_path, 'r', encoding='latin1') as f:
                    lines = f.readlines()

    return [line.strip() for line in lines if line.strip()]


def parse_flip(token: str) -> flips.Swap:
    """Parse a 'LEFT,RIGHT' token into a Swap."""
    parts = token.split(',')
    if len(parts) != 2:
        raise ValueError(f"Flip '{token}' must look like LEFT,RIGHT (for example 0,1).")
    try:
        return flips.Swap(int(parts[0]), int(parts[1]))
    except ValueError:
        raise ValueError(f"Flip '{token}' must contain two integers.") from None


def parse_pair(item: str, delimiter: str = ',') -> tuple[str, str]:
    """Split a 'SRC<delimiter>DEST' item into its two strings."""
    parts = item.split(delimiter)
    if len(parts) != 2:
        raise ValueError(f"Pair '{item}' must contain exactly one '{delimiter}'.")
    return parts[0].strip(), parts[1].strip()


def _gather_items(items: Sequence[str], input_file: str | None) -> list[str]:
    """Combine positional items with lines from *input_file* (stdin when neither is given)."""
    collected = list(items)
    if input_file is None and not collected:
        input_file = '-'
    if input_file is not None:
        collected.extend(read_lines(input_file))
    return collected


def _flips_to_list(swaps: Sequence[tuple[int, int]]) -> list[list[int]]:
    return [[left, right] for left, right in swaps]


def check_mode(
    src: str,
    dest: str,
    flip_tokens: Sequence[str],
) -> list[dict[str, Any]]:
    """Verify one list of flips from the command line."""
    swaps = [parse_flip(token) for token in flip_tokens]
    matched = flips.flips_match(src, dest, swaps)
    if not matched:
        logging.info(f"Flips do not turn '{src}' into '{dest}'.")
    return [{'src': src, 'dest': dest, 'flips': _flips_to_list(swaps), 'match': matched}]


def sequence_mode(
    pairs: Iterable[tuple[str, str]],
) -> list[dict[str, Any]]:
    """Find a shortest flip sequence for every pair."""
    rows = []
    for src, dest in pairs:
        try:
            swaps = flips.minimal_flips(src, dest)
        except flips.NoSequenceExists as e:
            logging.warning(str(e))
            rows.append({'src': src, 'dest': dest, 'flips': None, 'distance': None})
            continue
        rows.append({'src': src, 'dest': dest, 'flips': _flips_to_list(swaps), 'distance': len(swaps)})
    return rows


def distance_mode(
    pairs: Iterable[tuple[str, str]],
) -> list[dict[str, Any]]:
    """Report the flip distance for every pair."""
    rows = []
    for src, dest in pairs:
        distance = flips.flip_distance(src, dest)
        if distance == math.inf:
            logging.warning(f"'{src}' and '{dest}' are not anagrams; distance is infinite.")
            distance = None
        rows.append({'src': src, 'dest': dest, 'distance': distance})
    return rows


def count_mode(
    strings: Iterable[str],
    max_dist: int,
    length: int | None = None,
    quiet: bool = False,
) -> list[dict[str, Any]]:
    """Count similar substring pairs for every string."""
    rows = []
    for s in strings:
        if length is None:
            count = flips.similar_pairs_count(s, max_dist, quiet=quiet)
        elif length > len(s) - 1:
            logging.warning(f"Skipping '{s}': too short for substrings of length {length}.")
            continue
        else:
            count = flips.similar_substrings(s, max_dist, length)
        rows.append({'string': s, 'max_dist': max_dist, 'length': length, 'count': count})
    return rows


def _format_flips_text(swaps: Sequence[Sequence[int]]) -> str:
    return ' '.join(f"({left},{right})" for left, right in swaps)


def _format_arrow_line(mode: str, row: Mapping[str, Any]) -> str:
    if mode == 'check':
        verdict = 'match' if row['match'] else 'no match'
        return f"{row['src']} -> {row['dest']}: {verdict}"
    if mode == 'sequence':
        if row['flips'] is None:
            return f"{row['src']} -> {row['dest']}: no flip sequence"
        if not row['flips']:
            return f"{row['src']} -> {row['dest']}: no flips needed"
        return f"{row['src']} -> {row['dest']}: {_format_flips_text(row['flips'])}"
    if mode == 'distance':
        distance = 'infinite' if row['distance'] is None else row['distance']
        return f"{row['src']} -> {row['dest']}: {distance}"
    scope = 'all lengths' if row['length'] is None else f"length {row['length']}"
    return f"{row['string']}: {row['count']} pair(s) within distance {row['max_dist']} ({scope})"


def render_report(mode: str, rows: Sequence[Mapping[str, Any]], output_format: str = 'arrow') -> str:
    """
    Render result rows in the requested format.

    'json' and 'yaml' emit {"results": [...]}; 'csv' writes a header row of
    column names, with flips as space-separated LEFT-RIGHT tokens.
    """
    if output_format == 'json':
        return json.dumps({'results': list(rows)}, indent=2) + "\n"
    if output_format == 'yaml':
        return yaml.safe_dump({'results': [dict(row) for row in rows]}, sort_keys=False)
    if output_format == 'csv':
        output = io.StringIO()
        if rows:
            writer = csv.DictWriter(output, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            for row in rows:
                cells = dict(row)
                if 'flips' in cells:
                    cells['flips'] = ' '.join(f"{left}-{right}" for left, right in cells['flips'] or [])
                writer.writerow(cells)
        return output.getvalue()

    if output_format != 'arrow':
        logging.warning(f"Unknown output format '{output_format}'. Defaulting to 'arrow'.")
    return "".join(_format_arrow_line(mode, row) + "\n" for row in rows)


@contextlib.contextmanager
def smart_open_output(filename: str, newline: str | None = None) -> Iterable[TextIO]:
    """
    Context manager that yields a file object for writing.
    If filename is '-', yields sys.stdout.
    """
    if filename == '-':
        yield sys.stdout
    else:
        with open(filename, 'w', encoding='utf-8', newline=newline) as f:
            yield f


def write_report(report_content: str, output_file: str, output_format: str = 'arrow') -> None:
    newline = '' if output_format == 'csv' else None
    with smart_open_output(output_file, newline=newline) as outfile:
        outfile.write(report_content)
    if output_file != '-':
        logging.info(f"Report successfully written to '{output_file}'.")


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '-o', '--output',
        help="Save results to this file. Use '-' to print to the screen.",
    )
    parser.add_argument(
        '-f', '--format',
        choices=OUTPUT_FORMATS,
        help="Choose an output format (default: arrow).",
    )


def _add_input_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        '-i', '--input',
        help="Read one item per line from this file. Use '-' for stdin.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Flip distance tool: adjacent-swap distances between anagrams.",
        epilog="Examples:\n" + "\n".join(
            f"  {details['example']}" for details in MODE_DETAILS.values()
        ),
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        '-c', '--config',
        default="flipstats.yaml",
        help="The path to your YAML configuration file.",
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="Show more detailed log messages.",
    )
    verbosity.add_argument(
        '-q', '--quiet',
        action='store_true',
        help="Hide progress bars and show fewer log messages.",
    )

    subparsers = parser.add_subparsers(dest='mode', required=True, metavar='mode')

    check_parser = subparsers.add_parser('check', help=MODE_DETAILS['check']['summary'])
    check_parser.add_argument('src', help="The string to start from.")
    check_parser.add_argument('dest', help="The target string.")
    check_parser.add_argument(
        'flips',
        nargs='*',
        metavar='FLIP',
        help="Swaps to apply in order, each written LEFT,RIGHT.",
    )
    _add_output_arguments(check_parser)

    for mode in ('sequence', 'distance'):
        pair_parser = subparsers.add_parser(mode, help=MODE_DETAILS[mode]['summary'])
        pair_parser.add_argument(
            'pairs',
            nargs='*',
            metavar='PAIR',
            help="Pairs written SRC,DEST.",
        )
        _add_input_argument(pair_parser)
        pair_parser.add_argument(
            '--delimiter',
            help="Separator between SRC and DEST (default: ',').",
        )
        _add_output_arguments(pair_parser)

    count_parser = subparsers.add_parser('count', help=MODE_DETAILS['count']['summary'])
    count_parser.add_argument('strings', nargs='*', metavar='STRING', help="Strings to analyze.")
    _add_input_argument(count_parser)
    count_parser.add_argument(
        '-d', '--max-dist',
        type=int,
        help="The largest flip distance that still counts (default: 1).",
    )
    count_parser.add_argument(
        '-l', '--length',
        type=int,
        help="Only compare substrings of this length (default: every length).",
    )
    _add_output_arguments(count_parser)

    return parser


def _apply_cli_overrides(config: MutableMapping[str, Any], args: argparse.Namespace) -> None:
    if getattr(args, 'output', None):
        config['output_file'] = args.output
    if getattr(args, 'format', None):
        config['output_format'] = args.format
    if getattr(args, 'delimiter', None):
        config['delimiter'] = args.delimiter
    if getattr(args, 'max_dist', None) is not None:
        config['max_dist'] = args.max_dist
    if getattr(args, 'length', None) is not None:
        config['length'] = args.length


def main(argv: Sequence[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.WARNING if args.quiet else logging.INFO
    handler = logging.StreamHandler()
    handler.setFormatter(MinimalFormatter())
    logging.basicConfig(level=log_level, handlers=[handler])

    config_path = args.config
    if not os.path.exists(config_path):
        if config_path != "flipstats.yaml":
            logging.error(f"Configuration file '{config_path}' not found.")
            sys.exit(1)
        config_path = None

    try:
        config = load_config(config_path)
        _apply_cli_overrides(config, args)
        validate_config(config)
    except yaml.YAMLError as exc:
        logging.error(f"Error parsing YAML file '{config_path}': {exc}")
        sys.exit(1)
    except ConfigError as exc:
        logging.error(str(exc))
        sys.exit(1)

    logging.debug(f"Selected mode: {args.mode}")

    try:
        if args.mode == 'check':
            rows = check_mode(args.src, args.dest, args.flips)
        elif args.mode in ('sequence', 'distance'):
            items = _gather_items(args.pairs, args.input)
            pairs = [parse_pair(item, config['delimiter']) for item in items]
            handler_func = sequence_mode if args.mode == 'sequence' else distance_mode
            rows = handler_func(pairs)
        else:
            items = _gather_items(args.strings, args.input)
            rows = count_mode(items, config['max_dist'], config['length'], quiet=args.quiet)
    except FileNotFoundError as e:
        logging.error(f"File not found: '{getattr(e, 'filename', None) or e}'")
        sys.exit(1)
    except (ValueError, UnicodeDecodeError) as e:
        logging.error(str(e))
        sys.exit(1)

    report_content = render_report(args.mode, rows, config['output_format'])
    try:
        write_report(report_content, config['output_file'], config['output_format'])
    except OSError as e:
        logging.error(f"Failed to write report to '{config['output_file']}'. Error: {e}")
        sys.exit(1)

    logging.info(f"Processed {len(rows)} item(s) in '{args.mode}' mode.")


if __name__ == "__main__":
    main()
