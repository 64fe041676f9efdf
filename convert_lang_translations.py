#!/usr/bin/env python3
"""Convert translated JSON dictionaries into game `.lang` files.

Each scope (`client`, `server`) takes a translated dictionary (`<scope>.json`)
and a template (`<scope>.lang`). When no template is given, the stock
`source/<scope>.lang` is loaded from --fallback-base (URL or directory).
Translated values replace matching entries; everything else in the template
is kept byte for byte.

Outputs (under --output-dir):
  - client.translated.lang
  - server.translated.lang
  - meta.lang (`name = <language>`, only with --language)

Typical usage:
  python convert_lang_translations.py --input-dir ./pt-BR --language pt-BR --dry-run
  python convert_lang_translations.py --client-json client.json \
    --fallback-base https://example.org/hytale-translation-converter
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from lang_merge import merge_with_report
from lang_sources import (
    DEFAULT_TIMEOUT_SEC,
    InputFileError,
    OutputWriteError,
    TemplateUnavailableError,
    TranslationsError,
    check_input_name,
    fetch_fallback_template,
    join_fallback_path,
    load_env_file,
    load_translations,
    read_template,
    write_output,
)

SCOPES = ("client", "server")
META_FILENAME = "meta.lang"
DEFAULT_FALLBACK_BASE = "."


@dataclass(frozen=True)
class ScopeInputs:
    scope: str
    json_path: Path | None
    lang_path: Path | None


@dataclass
class ScopeResult:
    scope: str
    output: Path | None = None
    template_source: str | None = None
    replaced: int = 0
    kept: int = 0
    unused: list[str] = field(default_factory=list)
    error: str | None = None
    skipped: bool = False


def fallback_rel_path(scope: str) -> str:
    return f"/source/{scope}.lang"


def output_name(scope: str) -> str:
    return f"{scope}.translated.lang"


def render_meta(language: str) -> str:
    return f"name = {language}"


def resolve_scope_inputs(
    scope: str,
    json_path: Path | None,
    lang_path: Path | None,
    input_dir: Path | None,
) -> ScopeInputs:
    if input_dir is not None:
        if json_path is None:
            candidate = input_dir / f"{scope}.json"
            json_path = candidate if candidate.is_file() else None
        if lang_path is None:
            candidate = input_dir / f"{scope}.lang"
            lang_path = candidate if candidate.is_file() else None

    if json_path is not None:
        check_input_name(json_path, f"{scope}-json")
    if lang_path is not None:
        check_input_name(lang_path, f"{scope}-lang")
    return ScopeInputs(scope=scope, json_path=json_path, lang_path=lang_path)


def convert_scope(
    inputs: ScopeInputs,
    output_dir: Path,
    fallback_base: str,
    *,
    timeout_sec: float,
    dry_run: bool,
) -> ScopeResult:
    result = ScopeResult(scope=inputs.scope)
    if inputs.json_path is None:
        result.skipped = True
        return result

    try:
        translations = load_translations(inputs.json_path)
        if inputs.lang_path is not None:
            template = read_template(inputs.lang_path)
            result.template_source = str(inputs.lang_path)
        else:
            rel_path = fallback_rel_path(inputs.scope)
            template = fetch_fallback_template(fallback_base, rel_path, timeout_sec)
            result.template_source = join_fallback_path(fallback_base, rel_path)
    except (TranslationsError, TemplateUnavailableError) as exc:
        result.error = str(exc)
        return result

    merged = merge_with_report(template, translations)
    result.replaced = len(merged.replaced)
    result.kept = len(merged.kept)
    result.unused = merged.unused
    output = output_dir / output_name(inputs.scope)
    if not dry_run:
        try:
            write_output(output, merged.text)
        except OutputWriteError as exc:
            result.error = str(exc)
            return result
    result.output = output
    return result


def build_report(
    results: list[ScopeResult],
    meta_path: Path | None,
    meta_error: str | None,
    dry_run: bool,
) -> dict:
    return {
        "mode": "dry-run" if dry_run else "apply",
        "meta": meta_path.as_posix() if meta_path else None,
        "meta_error": meta_error,
        "scopes": [
            {
                "scope": r.scope,
                "skipped": r.skipped,
                "template": r.template_source,
                "output": r.output.as_posix() if r.output else None,
                "replaced": r.replaced,
                "kept": r.kept,
                "unused": r.unused,
                "error": r.error,
            }
            for r in results
        ],
    }


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Merge translated JSON dictionaries into game .lang templates.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=Path(".env"),
        help="Dotenv file with LANG_* defaults. Default: .env",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        default=None,
        help="Directory holding client.json/client.lang/server.json/server.lang.",
    )
    for scope in SCOPES:
        parser.add_argument(f"--{scope}-json", type=Path, default=None)
        parser.add_argument(
            f"--{scope}-lang",
            type=Path,
            default=None,
            help=f"Template for {scope} scope. Default: fallback source/{scope}.lang",
        )
    parser.add_argument(
        "--fallback-base",
        default=None,
        help="URL or directory holding source/<scope>.lang (env: LANG_FALLBACK_BASE).",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Where translated files are written (env: LANG_OUTPUT_DIR). Default: .",
    )
    parser.add_argument(
        "--language",
        default=None,
        help="Language name for meta.lang (env: LANG_META_LANGUAGE). Omit to skip.",
    )
    parser.add_argument(
        "--timeout-sec",
        type=float,
        default=None,
        help=f"Fallback fetch timeout (env: LANG_FETCH_TIMEOUT). Default: {DEFAULT_TIMEOUT_SEC}",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Merge and report only. No files are written.",
    )
    parser.add_argument(
        "--report-json",
        type=Path,
        default=None,
        help="Optional report output path.",
    )
    args = parser.parse_args(argv)

    env_file = args.env_file.resolve()
    loaded_vars = load_env_file(env_file)
    if loaded_vars:
        print(f"Loaded {loaded_vars} env var(s) from {env_file}")

    fallback_base = (
        args.fallback_base or os.getenv("LANG_FALLBACK_BASE") or DEFAULT_FALLBACK_BASE
    )
    output_dir = (args.output_dir or Path(os.getenv("LANG_OUTPUT_DIR") or ".")).resolve()
    language = (args.language or os.getenv("LANG_META_LANGUAGE") or "").strip()
    try:
        timeout_sec = (
            args.timeout_sec
            if args.timeout_sec is not None
            else float(os.getenv("LANG_FETCH_TIMEOUT") or DEFAULT_TIMEOUT_SEC)
        )
    except ValueError:
        print("[error] LANG_FETCH_TIMEOUT must be a number")
        return 2
    if timeout_sec <= 0:
        print("[error] --timeout-sec must be > 0")
        return 2

    try:
        scope_inputs = [
            resolve_scope_inputs(
                scope,
                getattr(args, f"{scope}_json"),
                getattr(args, f"{scope}_lang"),
                args.input_dir,
            )
            for scope in SCOPES
        ]
    except InputFileError as exc:
        print(f"[error] {exc}")
        return 2

    if not any(inputs.json_path for inputs in scope_inputs):
        print("[error] No translation JSON given (need client.json and/or server.json).")
        return 2

    results: list[ScopeResult] = []
    for inputs in scope_inputs:
        result = convert_scope(
            inputs,
            output_dir,
            fallback_base,
            timeout_sec=timeout_sec,
            dry_run=args.dry_run,
        )
        results.append(result)

        if result.skipped:
            print(f"[skip] {inputs.scope}: no {inputs.scope}.json")
            continue
        if result.error:
            print(f"[error] {inputs.scope}: {result.error}")
            continue
        print(
            f"[merged] {inputs.scope} -> {result.output} "
            f"(replaced={result.replaced} kept={result.kept})"
        )
        for key in result.unused[:20]:
            print(f"  [unused] {key}")
        if len(result.unused) > 20:
            print(f"  ... and {len(result.unused) - 20} more")

    meta_path: Path | None = None
    meta_error: str | None = None
    if language:
        meta_path = output_dir / META_FILENAME
        try:
            if not args.dry_run:
                write_output(meta_path, render_meta(language))
        except OutputWriteError as exc:
            meta_error = str(exc)
            meta_path = None
            print(f"[error] meta: {meta_error}")
        else:
            print(f"[meta] {meta_path} (name = {language})")

    failed = [r.scope for r in results if r.error]
    if meta_error:
        failed.append("meta")
    mode = "DRY-RUN" if args.dry_run else "APPLY"
    print(
        f"[{mode}] merged={sum(1 for r in results if r.output)} "
        f"failed={len(failed)} skipped={sum(1 for r in results if r.skipped)} "
        f"replaced_keys={sum(r.replaced for r in results)}",
    )

    if args.report_json:
        report_path = args.report_json.resolve()
        report = build_report(results, meta_path, meta_error, args.dry_run)
        try:
            write_output(
                report_path,
                json.dumps(report, ensure_ascii=False, indent=2) + "\n",
            )
        except OutputWriteError as exc:
            print(f"[error] report: {exc}")
            return 1
        print(f"Report: {report_path}")

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
