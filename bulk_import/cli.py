from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from bulk_import import __version__ as TOOL_VERSION
from bulk_import.catalog import default_registry
from bulk_import.contracts import build_run_summary, wrap_payload
from bulk_import.errors import (
    ISSUE_DEFINITIONS,
    BulkImportError,
    MalformedDocument,
    UnknownTemplateType,
    UnsupportedUploadFormat,
)
from bulk_import.generator import FORMATS, TemplateGenerator, template_filename
from bulk_import.loader import load_upload
from bulk_import.records import RecordParser
from bulk_import.report import build_validation_payload, format_validation_errors, write_validation_report
from bulk_import.schema import TemplateType
from bulk_import.validator import BulkDataValidator

EXIT_SUCCESS = 0
EXIT_COMMAND_ERROR = 1
EXIT_PARSE_FAILED = 2
EXIT_VALIDATE_FAILED = 5

TEMPLATE_TYPE_CHOICES = [member.value for member in TemplateType]


class CliError(Exception):
    def __init__(self, message: str, code: int = EXIT_COMMAND_ERROR) -> None:
        super().__init__(message)
        self.code = code


class BulkImportArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        raise CliError(message, EXIT_COMMAND_ERROR)


def eprint(message: str) -> None:
    print(message, file=sys.stderr)


def emit_human(message: str, *, quiet: bool = False) -> None:
    if not quiet:
        eprint(message)


def json_dumps(payload: Any) -> str:
    return json.dumps(payload, indent=2, ensure_ascii=False, sort_keys=True)


def maybe_emit_json_stdout(payload: Any, enabled: bool) -> None:
    if enabled:
        print(json_dumps(payload))


def safe_output_path(path: Path) -> Path:
    if path.exists():
        raise CliError(f"Refusing to overwrite existing output: {path}", EXIT_COMMAND_ERROR)
    return path


def classify_exception(exc: Exception) -> int:
    if isinstance(exc, CliError):
        return exc.code
    if isinstance(exc, (UnknownTemplateType, UnsupportedUploadFormat, FileNotFoundError)):
        return EXIT_COMMAND_ERROR
    if isinstance(exc, (MalformedDocument, UnicodeDecodeError)):
        return EXIT_PARSE_FAILED
    return EXIT_COMMAND_ERROR


def render_validate_text(payload: dict[str, Any], issues_text: str, *, verbose: bool) -> str:
    lines = [
        "bulk-import validate",
        f"Input: {payload['run_summary']['input_file']}",
        f"Template: {payload['template_type']}",
        f"Valid: {payload['is_valid']}",
        f"Rows: {payload['total_rows']} total, {payload['valid_rows']} valid, {payload['invalid_rows']} invalid",
        f"Errors: {payload['error_count']}",
        f"Warnings: {payload['warning_count']}",
    ]
    if payload["issue_counts"]:
        lines.append("Issues by code:")
        lines.extend(f"- {code}: {count}" for code, count in payload["issue_counts"].items())
    if verbose and issues_text:
        lines.append(issues_text.rstrip())
    return "\n".join(lines) + "\n"


def build_parser() -> argparse.ArgumentParser:
    parser = BulkImportArgumentParser(prog="bulk-import", description="Bulk upload templates and upload validation.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    template = subparsers.add_parser("template", help="Generate a blank upload template.")
    template.add_argument("template_type", help=f"One of: {', '.join(TEMPLATE_TYPE_CHOICES)}")
    template.add_argument("--format", choices=list(FORMATS), help="Template file format (default: csv, or the --output suffix)")
    template.add_argument("-o", "--out", dest="out_dir", help="Output directory (default: current directory)")
    template.add_argument("--output", help="Explicit template output path")
    template.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    template.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")

    validate = subparsers.add_parser("validate", help="Validate a filled-in template.")
    validate.add_argument("input", help="Uploaded .csv/.txt/.xlsx/.xlsm file")
    validate.add_argument("--type", dest="template_type", required=True, help=f"One of: {', '.join(TEMPLATE_TYPE_CHOICES)}")
    validate.add_argument("--sheet", dest="sheet_name", help="Workbook sheet name")
    validate.add_argument("--report", help="Write the CSV validation report to this path")
    validate.add_argument("--json", action="store_true", help="Write machine JSON to stdout")
    validate.add_argument("-q", "--quiet", action="store_true", help="Minimal human logs")
    validate.add_argument("-v", "--verbose", action="store_true", help="List every finding grouped by row")

    types = subparsers.add_parser("types", help="List template types and their columns.")
    types.add_argument("--json", action="store_true", help="Write machine JSON to stdout")

    explain = subparsers.add_parser("explain", help="Explain an issue code.")
    explain.add_argument("issue_code", help="Issue code, e.g. duplicate_value")
    explain.add_argument("--json", action="store_true", help="Write machine JSON to stdout")

    subparsers.add_parser("version", help="Print version")
    return parser


def resolve_template_format(requested: str | None, output: str | None) -> str:
    suffix = Path(output).suffix.lower().lstrip(".") if output else ""
    if suffix and suffix not in FORMATS:
        raise CliError(
            f"Unsupported template format '{suffix}'. Supported: {', '.join(FORMATS)}",
            EXIT_COMMAND_ERROR,
        )
    if requested and suffix and requested != suffix:
        raise CliError(f"--format {requested} conflicts with output suffix '.{suffix}'", EXIT_COMMAND_ERROR)
    return requested or suffix or "csv"


def run_template(args: argparse.Namespace) -> int:
    try:
        template_type = TemplateType.parse(args.template_type)
        fmt = resolve_template_format(args.format, args.output)
        if args.output:
            output_path = Path(args.output)
        else:
            out_dir = Path(args.out_dir) if args.out_dir else Path.cwd()
            output_path = out_dir / template_filename(template_type, fmt)
        output_path = safe_output_path(output_path)

        generator = TemplateGenerator(default_registry())
        generator.write(template_type, output_path, fmt)
        columns = len(generator.registry.fields_for(template_type))
        if args.json:
            payload = wrap_payload(
                "bulk_import.template",
                {"template_type": template_type.value, "format": fmt, "version": generator.version, "columns": columns},
                build_run_summary(command="template", output_path=output_path, metrics={"columns": columns}),
            )
            maybe_emit_json_stdout(payload, True)
        else:
            emit_human(f"Template written: {output_path}", quiet=args.quiet)
        return EXIT_SUCCESS
    except Exception as exc:
        eprint(str(exc))
        return classify_exception(exc)


def run_validate(args: argparse.Namespace) -> int:
    input_path = Path(args.input)
    if not input_path.exists():
        eprint(f"File not found: {input_path}")
        return EXIT_COMMAND_ERROR

    try:
        template_type = TemplateType.parse(args.template_type)
        report_path = safe_output_path(Path(args.report)) if args.report else None
        registry = default_registry()

        loaded = load_upload(input_path, sheet_name=args.sheet_name)
        upload = RecordParser(registry).parse_rows(loaded["rows"], template_type)
        result = BulkDataValidator(registry).validate_upload(upload)

        if report_path is not None:
            write_validation_report(result, report_path)
        payload = build_validation_payload(
            result,
            template_type=template_type.value,
            input_path=input_path,
            report_path=report_path,
            warnings=[*loaded["warnings"], *upload.warnings],
        )
        if args.json:
            maybe_emit_json_stdout(payload, True)
        else:
            for warning in payload["run_summary"]["warnings"]:
                emit_human(f"Warning: {warning}", quiet=args.quiet)
            issues_text = format_validation_errors([*result.errors, *result.warnings])
            emit_human(render_validate_text(payload, issues_text, verbose=args.verbose).rstrip(), quiet=args.quiet)
            if report_path is not None:
                emit_human(f"Validation report: {report_path}", quiet=args.quiet)
        return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATE_FAILED
    except Exception as exc:
        eprint(str(exc))
        return classify_exception(exc)


def run_types(args: argparse.Namespace) -> int:
    registry = default_registry()
    payload = {
        template_type.value: {
            "sections": [section.name for section in registry.sections_for(template_type)],
            "columns": [f.name for f in registry.fields_for(template_type)],
            "required": [f.name for f in registry.fields_for(template_type) if f.required],
            "unique": list(registry.unique_fields_for(template_type)),
        }
        for template_type in registry.template_types
    }
    if args.json:
        maybe_emit_json_stdout(payload, True)
        return EXIT_SUCCESS
    lines = []
    for name, info in payload.items():
        lines.append(f"{name}: {len(info['columns'])} columns, required: {', '.join(info['required']) or '[none]'}")
        if info["unique"]:
            lines.append(f"  unique: {', '.join(info['unique'])}")
    print("\n".join(lines))
    return EXIT_SUCCESS


def run_explain(args: argparse.Namespace) -> int:
    definition = ISSUE_DEFINITIONS.get(args.issue_code)
    if definition is None:
        eprint(f"Unknown issue code: {args.issue_code}")
        return EXIT_COMMAND_ERROR
    payload = {
        "issue_code": args.issue_code,
        "severity": definition["severity"],
        "description": definition["description"],
        "blocks_row": definition["severity"] == "error",
    }
    if args.json:
        maybe_emit_json_stdout(payload, True)
    else:
        print(
            "\n".join(
                [
                    f"Issue: {args.issue_code}",
                    f"Severity: {payload['severity']}",
                    f"What it means: {payload['description']}",
                    f"Blocks the row: {'yes' if payload['blocks_row'] else 'no'}",
                ]
            )
        )
    return EXIT_SUCCESS


def run_version() -> int:
    print(TOOL_VERSION)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    try:
        parser = build_parser()
        args = parser.parse_args(argv)
        if args.command == "template":
            return run_template(args)
        if args.command == "validate":
            return run_validate(args)
        if args.command == "types":
            return run_types(args)
        if args.command == "explain":
            return run_explain(args)
        if args.command == "version":
            return run_version()
        raise CliError(f"Unknown command: {args.command}", EXIT_COMMAND_ERROR)
    except CliError as exc:
        eprint(str(exc))
        return exc.code
    except BulkImportError as exc:
        eprint(str(exc))
        return classify_exception(exc)


if __name__ == "__main__":
    raise SystemExit(main())
