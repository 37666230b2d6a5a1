"""Constants across gpush."""


from tuikit.textools import style_text as color


GOOD   = "green"
BAD    = "red"
PROMPT = "yellow"
INFO   = "cyan"
SPEED  = 0.0075
HOLD   = 0.01
APP    = "[gpush]"
GPUSH  = color(f"{APP} ", "magenta")
I      = 8

OLLAMA_API_URL        = "http://localhost:11434/api/generate"
OLLAMA_MODEL          = "codellama"
AI_TIMEOUT_S          = 30.0
GIT_TIMEOUT_S         = 45.0
PUSH_TIMEOUT_S        = 120.0
DEFAULT_COMMIT_PREFIX = "update"
LOG_DIR_NAME          = "gpush"

AI_PROMPT = (
    "As an AI commit message generator, analyze the following git diff "
    "and create a concise, meaningful commit message following these "
    "rules:\n"
    "1. Use conventional commits format (feat, fix, docs, style, "
    "refactor, test, chore)\n"
    "2. Keep the message under 100 characters\n"
    "3. Focus on the main purpose of the changes\n"
    "4. Be specific but concise\n"
    "5. Use present tense, imperative mood\n"
    "\n"
    "Here's the diff:\n"
    "\n"
)
