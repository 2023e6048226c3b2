"""Mapping from file extensions to language identifiers."""

from __future__ import annotations

_GROUPS: dict[str, tuple[str, ...]] = {
    "abap": (".abap",),
    "bat": (".bat",),
    "bibtex": (".bib", ".bibtex"),
    "clojure": (".clj",),
    "coffeescript": (".coffee",),
    "c": (".c",),
    "cpp": (".cpp", ".cxx", ".cc", ".c++"),
    "csharp": (".cs",),
    "css": (".css",),
    "d": (".d",),
    "pascal": (".pas", ".pascal"),
    "diff": (".diff", ".patch"),
    "dart": (".dart",),
    "dockerfile": (".dockerfile",),
    "elixir": (".ex", ".exs"),
    "erlang": (".erl", ".hrl"),
    "fsharp": (".fs", ".fsi", ".fsx", ".fsscript"),
    "git-commit": (".gitcommit",),
    "git-rebase": (".gitrebase",),
    "go": (".go",),
    "groovy": (".groovy",),
    "handlebars": (".hbs", ".handlebars"),
    "haskell": (".hs",),
    "html": (".html", ".htm"),
    "ini": (".ini",),
    "java": (".java",),
    "javascript": (".js",),
    "javascriptreact": (".jsx",),
    "json": (".json",),
    "latex": (".tex", ".latex"),
    "less": (".less",),
    "lua": (".lua",),
    "makefile": (".makefile", "makefile"),
    "markdown": (".md", ".markdown"),
    "objective-c": (".m",),
    "objective-cpp": (".mm",),
    "perl": (".pl",),
    "perl6": (".pm",),
    "php": (".php",),
    "powershell": (".ps1", ".psm1"),
    "jade": (".pug", ".jade"),
    "python": (".py",),
    "r": (".r",),
    "razor": (".cshtml", ".razor"),
    "ruby": (".rb",),
    "rust": (".rs",),
    "scss": (".scss",),
    "sass": (".sass",),
    "scala": (".scala",),
    "shaderlab": (".shader",),
    "shellscript": (".sh", ".bash", ".zsh", ".ksh"),
    "sql": (".sql",),
    "swift": (".swift",),
    "typescript": (".ts",),
    "typescriptreact": (".tsx",),
    "xml": (".xml",),
    "xsl": (".xsl",),
    "yaml": (".yaml", ".yml"),
}

_BY_EXTENSION = {ext: lang for lang, exts in _GROUPS.items() for ext in exts}


def _extension(path: str) -> str:
    dot = path.rfind(".")
    if dot > path.rfind("/"):
        return path[dot:]
    return ""


def detect_language_id(uri: str) -> str:
    """Return the language identifier for a path or URI, or "" if unknown."""
    return _BY_EXTENSION.get(_extension(uri).lower(), "")