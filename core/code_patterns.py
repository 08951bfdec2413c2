# core/code_patterns.py
from typing import Final, List, Tuple

# keyword (matched case-insensitively in code) -> description used in the derived text
DOMAIN_PATTERNS: Final[Tuple[Tuple[str, str], ...]] = (
    ("json-rpc", "JSON-RPC protocol implementation"),
    ("mcp", "Model Context Protocol usage"),
    ("tools", "MCP tools implementation"),
    ("resources", "MCP resources implementation"),
    ("prompts", "MCP prompts implementation"),
    ("server", "MCP server implementation"),
    ("client", "MCP client implementation"),
    ("stdio", "Standard I/O transport"),
    ("sse", "Server-Sent Events transport"),
    ("initialize", "MCP initialization process"),
    ("notification", "MCP notifications"),
    ("request", "MCP requests handling"),
    ("response", "MCP responses handling"),
    ("error", "Error handling patterns"),
    ("schema", "Schema validation"),
    ("params", "Parameter handling"),
    ("result", "Result processing"),
)

# Signals counted by the code analyzer; confidence scales with count / len(SIGNAL_PATTERNS).
SIGNAL_PATTERNS: Final[Tuple[str, ...]] = ("JSON-RPC", "MCP tools", "MCP server")


def describe_code(code: str, language: str) -> str:
    """
    Turn source code into a short natural-language description for embedding:
    language, detected protocol patterns, and size.
    """
    lower = code.lower()
    found = [desc for keyword, desc in DOMAIN_PATTERNS if keyword in lower]

    lines = [f"Language: {language}"]
    if found:
        lines.append("Detected MCP patterns:")
        lines.extend(f"- {desc}" for desc in found)
    else:
        lines.append("No obvious MCP patterns detected in the code")
    lines.append(f"Code contains {len(code.splitlines()) or 1} lines")
    return "\n".join(lines)


def detect_signals(description: str) -> List[str]:
    return [p for p in SIGNAL_PATTERNS if p in description]
