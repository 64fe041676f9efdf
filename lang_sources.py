"""Inputs and outputs around the `.lang` merge.

- translation dictionaries: `client.json` / `server.json` (flat key -> text)
- templates: a user `.lang` file, or the fallback copy under a base URL/dir
- output files and dotenv-style configuration
"""

from __future__ import annotations

import http.client
import json
import os
import re
import urllib.request
from pathlib import Path
from typing import Literal

InputKind = Literal["client-json", "client-lang", "server-json", "server-lang"]

REQUIRED_FILENAMES: dict[str, str] = {
    "client-json": "client.json",
    "client-lang": "client.lang",
    "server-json": "server.json",
    "server-lang": "server.lang",
}
DEFAULT_TIMEOUT_SEC = 30
ENV_ASSIGN_RE = re.compile(
    r"^(?:export\s+)?(?P<key>[A-Za-z_][A-Za-z0-9_]*)\s*=\s*(?P<value>.*)$"
)
ENV_COMMENT_RE = re.compile(r"(?:^|\s+)#.*$")


class TranslationsError(ValueError):
    pass


class InputFileError(ValueError):
    pass


class TemplateUnavailableError(RuntimeError):
    pass


class OutputWriteError(RuntimeError):
    pass


def check_input_name(path: Path, kind: InputKind) -> None:
    expected = REQUIRED_FILENAMES[kind]
    if path.name != expected:
        raise InputFileError(f"Invalid file. Expected: {expected}")


def load_translations(path: Path) -> dict[str, str]:
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise TranslationsError(f"Cannot read translations {path}: {exc}") from exc

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise TranslationsError(f"Invalid JSON file: {path} ({exc})") from exc

    if not isinstance(payload, dict):
        raise TranslationsError(f"Translations must be a JSON object: {path}")
    for key, value in payload.items():
        if not isinstance(value, str):
            raise TranslationsError(
                f"Translation for '{key}' must be a string in {path}, "
                f"got {type(value).__name__}"
            )
    return payload


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise TemplateUnavailableError(f"Cannot read template {path}: {exc}") from exc


def is_url(base: str) -> bool:
    return base.startswith(("http://", "https://"))


def join_fallback_path(base: str, rel_path: str) -> str:
    sep = "" if rel_path.startswith("/") else "/"
    return f"{base.rstrip('/')}{sep}{rel_path}"


def fetch_fallback_template(
    base: str,
    rel_path: str,
    timeout_sec: float = DEFAULT_TIMEOUT_SEC,
) -> str:
    """Load the stock template `rel_path` from an http(s) base or a directory.

    A single attempt is made; any failure raises TemplateUnavailableError.
    """
    full_path = join_fallback_path(base, rel_path)
    if not is_url(base):
        path = Path(full_path)
        if not path.is_file():
            raise TemplateUnavailableError(f"Failed to load fallback lang: {full_path}")
        return read_template(path)

    request = urllib.request.Request(url=full_path, method="GET")
    try:
        with urllib.request.urlopen(  # noqa: S310 - user-provided endpoint by design
            request,
            timeout=timeout_sec,
        ) as response:
            return response.read().decode("utf-8-sig")
    # URLError, HTTPError and socket timeouts are all OSError.
    except (OSError, http.client.HTTPException, UnicodeDecodeError) as exc:
        raise TemplateUnavailableError(
            f"Failed to load fallback lang: {full_path} ({exc})"
        ) from exc


def write_output(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise OutputWriteError(f"Cannot write {path}: {exc}") from exc


def clean_env_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value[0] in {"'", '"'} and value[-1] == value[0]:
        return value[1:-1]
    return ENV_COMMENT_RE.sub("", value)


def load_env_file(env_file: Path) -> int:
    """Copy KEY=value pairs into os.environ; variables already set are kept."""
    if not env_file.is_file():
        return 0

    loaded = 0
    for line in env_file.read_text(encoding="utf-8", errors="ignore").splitlines():
        match = ENV_ASSIGN_RE.match(line.strip())
        if not match or match.group("key") in os.environ:
            continue
        os.environ[match.group("key")] = clean_env_value(match.group("value"))
        loaded += 1
    return loaded
