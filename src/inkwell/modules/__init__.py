"""Feature modules with auto-discovery.

Each subpackage may expose a ``router`` and a ``__module_info__`` dict.
Modules are imported in dependency order so that a module's models and
services exist before the modules that build on them.
"""

import logging
from importlib import import_module
from pathlib import Path
from types import ModuleType

from fastapi import APIRouter


logger = logging.getLogger(__name__)


def _load(name: str) -> ModuleType | None:
    try:
        return import_module(f"inkwell.modules.{name}")
    except ImportError as e:
        logger.warning(f"Failed to load module {name}: {e}")
        return None


def _dependency_order(modules: dict[str, ModuleType]) -> list[str]:
    ordered: list[str] = []

    def visit(name: str, trail: tuple[str, ...]) -> None:
        if name in ordered or name not in modules:
            return
        if name in trail:
            raise RuntimeError(f"Module dependency cycle: {' -> '.join((*trail, name))}")
        info = getattr(modules[name], "__module_info__", {})
        for dependency in info.get("dependencies", []):
            visit(dependency, (*trail, name))
        ordered.append(name)

    for name in sorted(modules):
        visit(name, ())
    return ordered


def discover_modules() -> list[APIRouter]:
    """Import every feature module and collect its router.

    Returns:
        Routers of the modules that define one, in dependency order.
    """
    modules_dir = Path(__file__).parent
    loaded = {
        path.name: module
        for path in sorted(modules_dir.iterdir())
        if path.is_dir() and not path.name.startswith("_")
        if (module := _load(path.name)) is not None
    }

    routers: list[APIRouter] = []
    for name in _dependency_order(loaded):
        router = getattr(loaded[name], "router", None)
        if router is not None:
            routers.append(router)
            logger.info(f"Loaded module: {name}")
    return routers
