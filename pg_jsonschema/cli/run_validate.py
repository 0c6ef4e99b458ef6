#!/usr/bin/env python3
# Copyright 2025 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI entry point for validating documents against a JSON Schema."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from ..config import engine_config
from ..exceptions import ConfigurationError, DocumentError
from ..file_io import SourceLocation, document_loader, format_source
from . import ValidationReport, validate_files


def parse_resources(entries: List[str]) -> Dict[str, Any]:
    """Load ``URI=PATH`` resource arguments into a URI -> document mapping."""
    resources = {}
    for entry in entries:
        uri, sep, path = entry.partition('=')
        if not sep or not uri or not path:
            raise ValueError(f"Expected URI=PATH, got '{entry}'")
        resources[uri] = document_loader.load(path).data
    return resources


def print_results(results: List[ValidationReport], output_format: str) -> None:
    if output_format == 'json':
        output = {
            'files': len(results),
            'errors': sum(len(r.errors) for r in results),
            'results': [
                {
                    'file': str(r.file_path),
                    'valid': r.valid,
                    'errors': r.errors,
                }
                for r in results
            ]
        }
        print(json.dumps(output, indent=2))
    elif output_format == 'github-actions':
        for result in results:
            for error in result.errors:
                print(
                    f"::error file={result.file_path},line={error.get('line', 1)},"
                    f"col={error.get('column', 1)}::{error['message']}"
                )
    else:  # human-readable
        for result in results:
            if result.errors:
                print(f"\n{result.file_path}:")
                for error in result.errors:
                    loc = SourceLocation(
                        file_path=result.file_path,
                        pointer=error.get('pointer'),
                        line=error.get('line'),
                        column=error.get('column'),
                    )
                    print(f"  ERROR: {error['message']}{format_source(loc)}")


def main(argv: List[str] | None = None) -> None:
    """Main entry point for the validator CLI."""
    parser = argparse.ArgumentParser(
        description='Validate JSON/YAML documents against a JSON Schema',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('schema', help='Schema file (.json, .yaml or .yml)')
    parser.add_argument('instances', nargs='+', help='Instance files to validate')
    parser.add_argument(
        '--format',
        choices=['human', 'json', 'github-actions'],
        default='human',
        help='Output format (default: human)',
    )
    parser.add_argument(
        '--draft',
        default=None,
        help='Dialect for schemas without $schema, e.g. 2020-12 or draft-07',
    )
    parser.add_argument('--strict', action='store_true', help='Reject unknown schema keywords')
    parser.add_argument('--no-formats', action='store_true', help='Do not assert "format" values')
    parser.add_argument(
        '--check-meta-schema',
        action='store_true',
        help='Validate the schema against its dialect meta-schema first',
    )
    parser.add_argument(
        '--resource',
        action='append',
        default=[],
        metavar='URI=PATH',
        help='Schema document available to $ref under URI (repeatable)',
    )
    parser.add_argument('--verbose', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)

    overrides: Dict[str, Any] = {}
    if args.draft is not None:
        overrides['default_dialect'] = args.draft
    if args.strict:
        overrides['strict_keywords'] = True
    if args.no_formats:
        overrides['validate_formats'] = False
    if args.check_meta_schema:
        overrides['check_meta_schema'] = True
    if args.verbose:
        overrides['log_level'] = 'DEBUG'

    try:
        config = engine_config.with_overrides(**overrides)
    except ConfigurationError as exc:
        parser.error(str(exc))
    config.set_logging()

    try:
        resources = parse_resources(args.resource)
    except ValueError as exc:
        parser.error(str(exc))
    except DocumentError as exc:
        print(f"Failed to load resource: {exc}", file=sys.stderr)
        sys.exit(1)

    results = validate_files(Path(args.schema), [Path(p) for p in args.instances], config, resources)
    print_results(results, args.format)

    # Exit with error code if any document failed
    if any(not r.valid for r in results):
        sys.exit(1)
    if args.format == 'human':
        print(f"Validation succeeded: {len(results)} document(s) valid.")
    sys.exit(0)


if __name__ == '__main__':
    main()
