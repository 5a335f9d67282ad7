from pathlib import Path

_SYNTAX_ALIASES = {
    "hcl": "hcl",
    "native": "hcl",
    "terraform": "hcl",
    "tf": "hcl",
    "json": "json",
    "tf.json": "json",
}

_SUFFIX_SYNTAX_MAP = {
    ".tf": "hcl",
    ".hcl": "hcl",
    ".json": "json",
}

_SUPPORTED_SYNTAXES = set(_SYNTAX_ALIASES.values())


def normalize_syntax(syntax: str) -> str:
    normalized = syntax.strip().lower()
    resolved = _SYNTAX_ALIASES.get(normalized, normalized)
    if resolved not in _SUPPORTED_SYNTAXES:
        raise ValueError(f"Unsupported syntax '{syntax}'. Supported: {sorted(_SUPPORTED_SYNTAXES)}")
    return resolved


def detect_syntax_from_path(file_path: Path) -> str:
    suffix = file_path.suffix.lower()
    if suffix in _SUFFIX_SYNTAX_MAP:
        return _SUFFIX_SYNTAX_MAP[suffix]
    raise ValueError(f"Unsupported file extension: {suffix}")


def resolve_syntax(syntax: str | None, file_path: Path | None) -> str:
    if syntax:
        return normalize_syntax(syntax)
    if file_path:
        return detect_syntax_from_path(file_path)
    raise ValueError("Syntax must be provided when no file path is available.")


def is_configuration_file(file_path: Path) -> bool:
    name = file_path.name.lower()
    return name.endswith((".tf", ".tf.json"))
