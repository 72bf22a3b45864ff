# File: schemagen/templates.py
"""
SchemaGen - Template Loading & Emission
========================================
Two named templates drive code generation:

* ``model``   — recognises ``{{namespace}}``, ``{{className}}``,
  ``{{tableName}}`` and ``{{relationships}}``;
* ``service`` — recognises ``{{namespace}}``, ``{{modelNamespace}}``,
  ``{{className}}``, ``{{modelClass}}``, ``{{relationshipsArray}}``,
  ``{{relatedCreateLogic}}``, ``{{relatedUpdateLogic}}`` and
  ``{{relatedDeleteLogic}}``.

Templates are looked up as ``<name>.stub`` in an optional user directory
first, then in the stubs bundled with the package.  Unknown placeholders in
a template are passed through untouched.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from schemagen.errors import TemplateError
from schemagen.utils import ensure_directory, find_tokens, substitute_tokens, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("schemagen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODEL_TEMPLATE: str = "model"
SERVICE_TEMPLATE: str = "service"

STUB_SUFFIX: str = ".stub"
BUNDLED_STUBS_DIR: Path = Path(__file__).resolve().parent / "stubs"

RECOGNISED_TOKENS: Dict[str, Tuple[str, ...]] = {
    MODEL_TEMPLATE: (
        "namespace",
        "className",
        "tableName",
        "relationships",
    ),
    SERVICE_TEMPLATE: (
        "namespace",
        "modelNamespace",
        "className",
        "modelClass",
        "relationshipsArray",
        "relatedCreateLogic",
        "relatedUpdateLogic",
        "relatedDeleteLogic",
    ),
}


# ---------------------------------------------------------------------------
# TemplateLoader
# ---------------------------------------------------------------------------


class TemplateLoader:
    """
    Resolves named templates to their text.

    Usage::

        loader = TemplateLoader(Path("./my_stubs"))
        text = loader.load("model")
    """

    def __init__(self, templates_directory: Optional[Path] = None) -> None:
        self._search_dirs: List[Path] = []
        if templates_directory is not None:
            self._search_dirs.append(Path(templates_directory))
        self._search_dirs.append(BUNDLED_STUBS_DIR)

    @property
    def search_dirs(self) -> Sequence[Path]:
        return tuple(self._search_dirs)

    def resolve(self, name: str) -> Path:
        """Return the path of the first ``<name>.stub`` found."""
        if name not in RECOGNISED_TOKENS:
            raise TemplateError(f"Unknown template name: {name!r}")

        filename: str = f"{name}{STUB_SUFFIX}"
        for directory in self._search_dirs:
            candidate: Path = directory / filename
            if candidate.is_file():
                return candidate

        searched: str = ", ".join(str(d) for d in self._search_dirs)
        raise TemplateError(
            f"{name.capitalize()} stub not found (searched: {searched})."
        )

    def load(self, name: str) -> str:
        """
        Load the template text for *name*.

        Raises:
            TemplateError: if the template is missing or unreadable.
        """
        path: Path = self.resolve(name)
        try:
            text: str = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateError(f"Could not read {name} stub at {path}: {exc}") from exc

        passthrough: List[str] = [
            t for t in find_tokens(text) if t not in RECOGNISED_TOKENS[name]
        ]
        if passthrough:
            logger.debug("%s stub keeps unrecognised placeholders: %s", name, passthrough)
        logger.debug("Loaded %s template from %s (%d chars).", name, path, len(text))
        return text


# ---------------------------------------------------------------------------
# TemplateEmitter
# ---------------------------------------------------------------------------


class TemplateEmitter:
    """
    Renders a template for one kind and writes the result to disk.

    Shared by the model and service generators.  Stateless apart from the
    template kind.
    """

    def __init__(self, kind: str) -> None:
        if kind not in RECOGNISED_TOKENS:
            raise TemplateError(f"Unknown template name: {kind!r}")
        self._kind: str = kind
        self._tokens: Tuple[str, ...] = RECOGNISED_TOKENS[kind]

    @property
    def kind(self) -> str:
        return self._kind

    @property
    def tokens(self) -> Tuple[str, ...]:
        return self._tokens

    def render(self, template_text: str, values: Mapping[str, str]) -> str:
        """Substitute this kind's recognised tokens; everything else passes through."""
        missing: List[str] = [t for t in self._tokens if t not in values]
        if missing:
            raise ValueError(
                f"Missing values for {self._kind} tokens: {missing}"
            )
        recognised: Dict[str, str] = {t: values[t] for t in self._tokens}
        return substitute_tokens(template_text, recognised)

    def prepare_directory(self, directory: Path) -> Path:
        """Create the output subdirectory; an existing one is fine."""
        return ensure_directory(directory)

    def emit(self, directory: Path, filename: str, content: str) -> Path:
        """Write *content* to ``directory / filename``, overwriting."""
        target: Path = directory / filename
        write_file(target, content)
        logger.debug("Emitted %s file: %s", self._kind, target)
        return target


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MODEL_TEMPLATE",
    "SERVICE_TEMPLATE",
    "RECOGNISED_TOKENS",
    "BUNDLED_STUBS_DIR",
    "TemplateLoader",
    "TemplateEmitter",
]

logger.debug("schemagen.templates loaded.")
