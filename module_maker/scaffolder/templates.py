"""Stub rendering for module scaffolding.

Provides the TemplateRenderer class, which resolves ``.stub`` files across an
ordered list of stub directories and renders them by literal token
substitution.  Stubs are PHP and Blade sources that contain their own
``{{ $variable }}`` syntax.  Only the exact tokens in the replacement
mapping are touched; everything else, unknown ``{{tokens}}`` included, is
emitted verbatim.
"""

from __future__ import annotations

import re
from pathlib import Path

from module_maker.errors import StubMissingError
from module_maker.utils import read_text, write_text

# ---------------------------------------------------------------------------
# Stub directory discovery
# ---------------------------------------------------------------------------

BUNDLED_STUBS_DIR = Path(__file__).parent / "stubs"

STUB_SUFFIX = ".stub"


def render_text(template: str, replacements: dict[str, str]) -> str:
    """Replace every occurrence of every key of *replacements* in one pass.

    Matching runs left to right with longer keys tried first, and replaced
    values are never scanned again, so a value that itself contains a token
    is emitted literally.

    Examples::

        render_text("class {{module}}", {"{{module}}": "Blog"}) -> "class Blog"
        render_text("{{other}}", {"{{module}}": "Blog"})        -> "{{other}}"
    """
    if not replacements or not template:
        return template
    keys = sorted((key for key in replacements if key), key=len, reverse=True)
    if not keys:
        return template
    pattern = re.compile("|".join(re.escape(key) for key in keys))
    return pattern.sub(lambda match: replacements[match.group(0)], template)


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders ``.stub`` templates for module scaffolding.

    Stubs are looked up per name in *stub_dirs*, first match wins, with the
    bundled stubs always searched last.  This lets a host project override a
    single stub without copying the whole set.
    """

    def __init__(self, stub_dirs: list[Path] | None = None) -> None:
        dirs = [Path(d) for d in (stub_dirs or [])]
        if BUNDLED_STUBS_DIR not in dirs:
            dirs.append(BUNDLED_STUBS_DIR)
        self.stub_dirs = dirs

    # -- Lookup ------------------------------------------------------------

    def resolve(self, stub: str) -> Path:
        """Return the path of the first *stub* found in the stub directories.

        Raises:
            StubMissingError: If no directory provides the stub.
        """
        filename = stub if stub.endswith(STUB_SUFFIX) else stub + STUB_SUFFIX
        for directory in self.stub_dirs:
            candidate = directory / filename
            if candidate.is_file():
                return candidate
        raise StubMissingError(stub, self.stub_dirs)

    def list_stubs(self) -> dict[str, Path]:
        """Return ``{stub_name: resolved_path}`` for every available stub."""
        found: dict[str, Path] = {}
        for directory in self.stub_dirs:
            if not directory.is_dir():
                continue
            for path in sorted(directory.glob(f"*{STUB_SUFFIX}")):
                found.setdefault(path.name[: -len(STUB_SUFFIX)], path)
        return dict(sorted(found.items()))

    # -- Rendering ---------------------------------------------------------

    def render(self, stub: str, replacements: dict[str, str]) -> str:
        """Render a single stub with the provided replacements."""
        return render_text(read_text(self.resolve(stub)), replacements)

    def render_to_file(
        self,
        stub: str,
        output_path: Path,
        replacements: dict[str, str],
    ) -> Path:
        """Render a stub and write the result to *output_path*.

        Parent directories are created automatically.
        """
        return write_text(output_path, self.render(stub, replacements))
