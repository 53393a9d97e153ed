"""Module Maker -- HMVC module scaffolding for Laravel host projects.

Quick usage::

    from module_maker import Config, ModuleGenerator, ModuleSpec, HostRegistrar

    config = Config.discover(Path("/path/to/laravel-app"))
    spec = ModuleSpec.create("Blog", config, kind=ModuleKind.COMBINED)
    ModuleGenerator(config).generate(spec)
    HostRegistrar(config).register(spec.name, spec.kind)
"""

__version__ = "1.0.0"

from module_maker.config import Config, ModuleKind, RouteRegistration
from module_maker.errors import (
    ExternalToolError,
    GenerationError,
    InvalidNameError,
    ModuleExistsError,
    ModuleMakerError,
    RegistryFormatError,
    StubMissingError,
    UnknownModuleError,
)
from module_maker.inventory import HealthReport, Inventory, InventorySummary, ModuleInfo
from module_maker.registrations import HostRegistrar
from module_maker.scaffolder import (
    GenerationResult,
    ModuleGenerator,
    ModuleSpec,
    RelationAugmenter,
    TemplateRenderer,
)

__all__ = [
    "Config",
    "ExternalToolError",
    "GenerationError",
    "GenerationResult",
    "HealthReport",
    "HostRegistrar",
    "InvalidNameError",
    "Inventory",
    "InventorySummary",
    "ModuleExistsError",
    "ModuleGenerator",
    "ModuleInfo",
    "ModuleKind",
    "ModuleMakerError",
    "ModuleSpec",
    "RegistryFormatError",
    "RelationAugmenter",
    "RouteRegistration",
    "StubMissingError",
    "TemplateRenderer",
    "UnknownModuleError",
    "__version__",
]
