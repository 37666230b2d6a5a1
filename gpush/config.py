"""Layered runtime configuration for gpush.

Precedence order (low -> high):
1) argparse defaults
2) pyproject.toml ([tool.gpush])
3) git config (global, then local repository)
4) environment variables
5) explicit CLI options
"""
from __future__ import annotations

from argparse import Namespace, ArgumentParser
from dataclasses import dataclass
from pathlib import Path
import subprocess
import os

try:
    import tomllib
except ModuleNotFoundError:  # pragma: no cover
    import tomli as tomllib  # type: ignore[no-redef]


@dataclass(frozen=True)
class OptionSpec:
    dest: str
    key: str
    kind: str  # "bool" | "str" | "float"

    @property
    def git_key(self) -> str:
        return f"gpush.{self.key}"

    @property
    def env_key(self) -> str:
        return "GPUSH_" + self.key.upper().replace("-", "_")


SPECS: tuple[OptionSpec, ...] = (
    OptionSpec("model", "model", "str"),
    OptionSpec("ai_url", "ai-url", "str"),
    OptionSpec("ai_timeout", "ai-timeout", "float"),
    OptionSpec("git_timeout", "git-timeout", "float"),
    OptionSpec("push_timeout", "push-timeout", "float"),
    OptionSpec("no_ai", "no-ai", "bool"),
    OptionSpec("no_animation", "no-animation", "bool"),
    OptionSpec("plain", "plain", "bool"),
    OptionSpec("quiet", "quiet", "bool"),
    OptionSpec("debug", "debug", "bool"),
)

_BY_DEST = {spec.dest: spec for spec in SPECS}
_BY_KEY  = {spec.key: spec for spec in SPECS}

Diagnostic = dict[str, str]


def _parse_bool(raw: object) -> bool | None:
    if isinstance(raw, bool): return raw
    if not isinstance(raw, str): return None
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}: return True
    if value in {"0", "false", "no", "off"}: return False
    return None


def _parse_float(raw: object) -> float | None:
    if isinstance(raw, bool): return None
    try: value = float(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError): return None
    return value if value > 0 else None


def _diag(level: str, source: str, key: str, raw: object,
          message: str) -> Diagnostic:
    return {
        "level": level,
        "source": source,
        "key": key,
        "raw": str(raw),
        "message": message,
    }


def _repo_root(path: str) -> str | None:
    cur = os.path.abspath(path)
    while True:
        if os.path.isdir(os.path.join(cur, ".git")): return cur
        parent = os.path.dirname(cur)
        if parent == cur: return None
        cur = parent


def _find_pyproject(path: str) -> Path | None:
    cur = Path(path).expanduser().resolve()
    if cur.is_file(): cur = cur.parent
    while True:
        candidate = cur / "pyproject.toml"
        if candidate.is_file(): return candidate
        if cur.parent == cur: return None
        cur = cur.parent


def _load_pyproject(path: str) -> tuple[dict[str, object],
                                         list[Diagnostic], str | None]:
    pyproject = _find_pyproject(path)
    if pyproject is None: return {}, [], None
    try: data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"failed to parse pyproject.toml: {exc}"
        return {}, [_diag("error", "pyproject", "tool.gpush", "", msg)], \
            str(pyproject)

    table = data.get("tool", {}).get("gpush")
    if table is None: return {}, [], str(pyproject)
    if not isinstance(table, dict):
        msg = "tool.gpush must be a TOML table, e.g. [tool.gpush]"
        return {}, [_diag("error", "pyproject", "tool.gpush",
            type(table).__name__, msg)], str(pyproject)

    values: dict[str, object] = {}
    diagnostics: list[Diagnostic] = []
    for raw_key, raw_val in table.items():
        key  = str(raw_key).strip().lower().replace("_", "-")
        spec = _BY_KEY.get(key)
        if spec is None:
            diagnostics.append(_diag("warning", "pyproject", str(raw_key),
                raw_val, "unknown key in [tool.gpush]"))
            continue
        values[spec.dest] = raw_val
    return values, diagnostics, str(pyproject)


def _read_git_scope(scope: list[str], repo: str | None = None
                   ) -> dict[str, str]:
    cmd = ["git"]
    if repo: cmd += ["-C", repo]
    cmd += ["config", *scope, "--get-regexp", r"^gpush\."]
    try:
        cp = subprocess.run(cmd, check=False, capture_output=True,
             text=True, timeout=10)
    except (OSError, subprocess.TimeoutExpired): return {}
    if cp.returncode != 0: return {}
    out: dict[str, str] = {}
    for line in cp.stdout.splitlines():
        if not line.strip(): continue
        key, _, value = line.partition(" ")
        out[key.strip().lower()] = value.strip()
    return out


def _load_git(path: str) -> dict[str, str]:
    values = _read_git_scope(["--global"])
    repo   = _repo_root(path)
    if repo: values.update(_read_git_scope(["--local"], repo=repo))
    return {spec.dest: values[spec.git_key] for spec in SPECS
            if spec.git_key in values}


def _load_env(environ: dict[str, str] | None = None) -> dict[str, str]:
    env = os.environ if environ is None else environ
    return {spec.dest: env[spec.env_key] for spec in SPECS
            if spec.env_key in env}


def _coerce(dest: str, raw: object, source: str,
            diagnostics: list[Diagnostic]) -> object | None:
    spec = _BY_DEST.get(dest)
    if spec is None: return None
    if spec.kind == "bool":
        value = _parse_bool(raw)
        if value is None:
            diagnostics.append(_diag("warning", source, dest, raw,
                f"invalid boolean value for {dest}; use true/false"))
        return value
    if spec.kind == "float":
        number = _parse_float(raw)
        if number is None:
            diagnostics.append(_diag("warning", source, dest, raw,
                f"invalid value for {dest}; expected positive seconds"))
        return number
    if not isinstance(raw, str) or not raw.strip():
        diagnostics.append(_diag("warning", source, dest, raw,
            f"invalid value for {dest}; expected string"))
        return None
    return raw.strip()


def _explicit_cli_dests(argv: list[str], parser: ArgumentParser
                       ) -> set[str]:
    """Destinations the user set on the command line."""
    mapping  = parser._option_string_actions
    explicit: set[str] = set()
    for token in argv:
        if token == "--": break
        if not token.startswith("-"): continue
        action = mapping.get(token.split("=", 1)[0])
        if action is not None: explicit.add(action.dest)
    return explicit


def apply_layered_config(args: Namespace, argv: list[str],
                         parser: ArgumentParser,
                         environ: dict[str, str] | None = None
                        ) -> Namespace:
    """Apply file/git/env overrides unless set explicitly by CLI."""
    merged   = Namespace(**vars(args))
    explicit = _explicit_cli_dests(argv, parser)
    path     = getattr(merged, "path", ".") or "."

    py_vals, diagnostics, pyproject_path = _load_pyproject(path)
    layers = (
        ("pyproject", py_vals),
        ("git", _load_git(path)),
        ("env", _load_env(environ)),
    )
    sources = {k: "default" for k in vars(merged)}
    for dest in explicit: sources[dest] = "cli"

    for spec in SPECS:
        if spec.dest in explicit: continue
        for source, values in layers:
            if spec.dest not in values: continue
            value = _coerce(spec.dest, values[spec.dest], source,
                    diagnostics)
            if value is None: continue
            setattr(merged, spec.dest, value)
            sources[spec.dest] = source

    setattr(merged, "_gpush_config_sources", sources)
    setattr(merged, "_gpush_config_diagnostics", diagnostics)
    setattr(merged, "_gpush_config_files", {"pyproject": pyproject_path})
    return merged


def describe(args: Namespace) -> dict[str, object]:
    """Effective values with their sources, for `--show-config`."""
    sources = getattr(args, "_gpush_config_sources", {})
    return {
        "values": {spec.key: {"value": getattr(args, spec.dest, None),
                   "source": sources.get(spec.dest, "default")}
                   for spec in SPECS},
        "files": getattr(args, "_gpush_config_files", {}),
        "diagnostics": getattr(args, "_gpush_config_diagnostics", []),
    }
