"""Eloquent relationship augmentation for generated modules.

Adds ``belongsTo`` / ``hasMany`` methods to a module's model and matching
foreign-key columns to its create-table migration.  Model methods are wrapped
in marker blocks and migration columns are skipped when already present, so
running the augmentation twice changes nothing.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from module_maker.config import Config
from module_maker.naming import ModuleNames, camel_case, pluralize, snake_case, validate_name
from module_maker.registry import has_block, insert_block
from module_maker.utils import read_text, write_text


class RelationResult(BaseModel):
    """Files touched by a relationship augmentation."""

    methods_added: list[str] = Field(default_factory=list)
    columns_added: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class RelationAugmenter:
    """Adds relationships to an already-generated module."""

    def __init__(self, config: Config) -> None:
        self.config = config

    @staticmethod
    def validate(belongs_to: list[str], has_many: list[str]) -> None:
        """Raise ``InvalidNameError`` for any relation that is not an identifier."""
        for relation in [*belongs_to, *has_many]:
            validate_name(relation, "Relation")

    def apply(self, module: str, belongs_to: list[str], has_many: list[str]) -> RelationResult:
        result = RelationResult()
        if not belongs_to and not has_many:
            return result
        self.validate(belongs_to, has_many)
        self.add_methods(module, belongs_to, has_many, result)
        self.add_foreign_keys(module, belongs_to, result)
        return result

    # -- Model -------------------------------------------------------------

    def model_path(self, module: str) -> Path:
        return self.config.module_path(module) / "Models" / f"{module}.php"

    def add_methods(
        self,
        module: str,
        belongs_to: list[str],
        has_many: list[str],
        result: RelationResult,
    ) -> None:
        path = self.model_path(module)
        if not path.is_file():
            result.warnings.append(f"Model file not found: {path}")
            return

        content = read_text(path)
        lines = content.splitlines(keepends=True)
        closing = _last_closing_brace(lines)
        if closing < 0:
            result.warnings.append(f"Could not find the class body end in {path}")
            return

        head, tail = "".join(lines[:closing]), "".join(lines[closing:])
        owner = module.lower()

        for relation in belongs_to:
            marker = f"belongs-to:{relation}"
            if has_block(head, marker):
                continue
            body = _method(
                f"Get the {relation} that owns this {owner}.",
                camel_case(relation),
                f"return $this->belongsTo({self._model_class(relation)}::class);",
            )
            head = insert_block(head, marker, body, indent="    ")
            result.methods_added.append(camel_case(relation))

        for relation in has_many:
            marker = f"has-many:{relation}"
            if has_block(head, marker):
                continue
            method = camel_case(pluralize(relation))
            body = _method(
                f"Get the {pluralize(relation)} for this {owner}.",
                method,
                f"return $this->hasMany({self._model_class(relation)}::class);",
            )
            head = insert_block(head, marker, body, indent="    ")
            result.methods_added.append(method)

        if result.methods_added:
            write_text(path, head + tail)

    def _model_class(self, relation: str) -> str:
        names = ModuleNames(relation, self.config.namespace)
        return f"\\{names.module_namespace}\\Models\\{relation}"

    # -- Migration ---------------------------------------------------------

    def migration_path(self, module: str) -> Path | None:
        """The create-table migration, chosen like ``ModuleGenerator.migration_path``."""
        directory = self.config.module_path(module) / "Database" / "Migrations"
        table = ModuleNames(module, self.config.namespace).plural_snake
        if not directory.is_dir():
            return None
        matches = sorted(directory.glob(f"*_create_{table}_table.php"))
        return matches[0] if matches else None

    def add_foreign_keys(self, module: str, belongs_to: list[str], result: RelationResult) -> None:
        if not belongs_to:
            return
        path = self.migration_path(module)
        if path is None:
            result.warnings.append(f"No create-table migration found for module '{module}'")
            return

        lines = read_text(path).splitlines(keepends=True)
        anchor = next(
            (i for i, line in enumerate(lines) if "$table->timestamps();" in line), -1
        )
        if anchor < 0:
            result.warnings.append(f"No $table->timestamps(); line in {path.name}")
            return

        indent = lines[anchor][: len(lines[anchor]) - len(lines[anchor].lstrip())]
        existing = "".join(lines)
        new_lines: list[str] = []
        for relation in belongs_to:
            column = f"{snake_case(relation)}_id"
            if f"'{column}'" in existing:
                continue
            table = snake_case(pluralize(relation))
            new_lines.append(
                f"{indent}$table->foreignId('{column}')->nullable()"
                f"->constrained('{table}')->onDelete('cascade');\n"
            )
            result.columns_added.append(column)

        if new_lines:
            lines[anchor:anchor] = new_lines
            write_text(path, "".join(lines))


def _last_closing_brace(lines: list[str]) -> int:
    """Index of the last unindented ``}`` line (end of the class body)."""
    for index in range(len(lines) - 1, -1, -1):
        if lines[index].rstrip() == "}":
            return index
    return -1


def _method(summary: str, name: str, statement: str) -> list[str]:
    return [
        "/**",
        f" * {summary}",
        " */",
        f"public function {name}()",
        "{",
        f"    {statement}",
        "}",
    ]
