"""Module scaffolder -- renders a module's directory tree from stubs.

Quick usage::

    from module_maker.scaffolder import ModuleGenerator, ModuleSpec

    spec = ModuleSpec.create("Blog", config)
    result = ModuleGenerator(config).generate(spec)
"""

from module_maker.scaffolder.generator import GenerationResult, ModuleGenerator, ModuleSpec
from module_maker.scaffolder.relations import RelationAugmenter, RelationResult
from module_maker.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationResult",
    "ModuleGenerator",
    "ModuleSpec",
    "RelationAugmenter",
    "RelationResult",
    "TemplateRenderer",
]
