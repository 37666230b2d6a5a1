"""Stage, commit and push with classified git errors."""


from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import re


def _read_local_version() -> str | None:
    """Version from a source checkout's pyproject.toml."""
    pyproject = Path(__file__).resolve().parent.parent \
              / "pyproject.toml"
    if not pyproject.exists(): return None

    try: text = pyproject.read_text(encoding="utf-8")
    except OSError: return None

    match = re.search(r'^\s*version\s*=\s*"([^"]+)"', text,
            re.MULTILINE)
    return match.group(1) if match else None


try: __version__ = _read_local_version() or version("git-gpush")
except PackageNotFoundError:
    __version__ = "0+local"
