"""
Commit-message drafting through a local Ollama-compatible
`/api/generate` endpoint.

Any failure yields an empty string, and so does a reply
that is not a conventional commit subject. The caller then
falls back to the staged file list.
"""
# ======================= STANDARDS =======================
from dataclasses import dataclass
import logging as log
import re

# ===================== THIRD-PARTIES =====================
import requests

# ======================== LOCALS =========================
from ._constants import OLLAMA_API_URL, OLLAMA_MODEL
from ._constants import AI_PROMPT, AI_TIMEOUT_S


logger = log.getLogger("gpush.ai")

MAX_DIFF_CHARS = 12000

# type(scope): subject, subject at most 100 characters
CONVENTIONAL_SUBJECT = re.compile(
    r"^(feat|fix|docs|style|refactor|test|chore|perf|build|ci)"
    r"(\([\w./-]+\))?!?: \S.{0,99}$"
)


def clean_response(text: str) -> str:
    """First non-empty line, without quotes or code fences."""
    for line in text.splitlines():
        line = line.strip().strip("`").strip().strip("'\"").strip()
        if line: return line
    return ""


def is_conventional(message: str) -> bool:
    return CONVENTIONAL_SUBJECT.match(message) is not None


@dataclass(frozen=True)
class CommitMessageClient:
    url: str = OLLAMA_API_URL
    model: str = OLLAMA_MODEL
    timeout: float = AI_TIMEOUT_S

    def generate_commit_message(self, diff: str) -> str:
        """Draft a message for `diff`; empty string on any failure."""
        if not diff.strip():
            logger.info("empty diff; skipping message generation")
            return ""

        payload = {
            "model": self.model,
            "prompt": AI_PROMPT + diff[:MAX_DIFF_CHARS],
            "stream": False,
        }
        try:
            response = requests.post(self.url, json=payload,
                       timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("commit message generation failed: %s", e)
            return ""

        raw = data.get("response") if isinstance(data, dict) else None
        if not isinstance(raw, str):
            logger.warning("unexpected response payload from %s",
                self.url)
            return ""
        message = clean_response(raw)
        if not message:
            logger.warning("empty response from %s", self.url)
            return ""
        if not is_conventional(message):
            logger.warning("discarding non-conventional commit "
                "message: %r", message)
            return ""
        return message


def generate_commit_message(diff: str, url: str = OLLAMA_API_URL,
                            model: str = OLLAMA_MODEL,
                            timeout: float = AI_TIMEOUT_S) -> str:
    return CommitMessageClient(url, model, timeout) \
           .generate_commit_message(diff)
