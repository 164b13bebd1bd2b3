MUTATING_TOOLS = frozenset({"Write", "Edit", "MultiEdit"})

# Extensions that identify each language with its own rules document.
LANGUAGE_EXTENSIONS = {
    "python": ("py", "pyi"),
    "javascript": ("js", "jsx", "mjs", "cjs"),
    "typescript": ("ts", "tsx"),
    "shell": ("sh", "bash"),
}


def is_mutating_tool(tool_name: str) -> bool:
    return tool_name in MUTATING_TOOLS


def matches_extension(file_path: str, extensions) -> bool:
    """Case-sensitive suffix match of ``.ext`` against each configured extension."""
    return any(file_path.endswith("." + ext) for ext in extensions if ext)


def languages_for(files) -> list[str]:
    """Languages present among ``files``, in LANGUAGE_EXTENSIONS order."""
    return [
        language
        for language, extensions in LANGUAGE_EXTENSIONS.items()
        if any(matches_extension(f, extensions) for f in files)
    ]
