"""
Dependency resolution for feature modules.

Each catalog module lists the modules it needs in required_modules. A module
may only be active in a workspace when everything it requires is active too,
so activation walks dependencies first and deactivation walks dependents first.
"""

from typing import Dict, Iterable, List, Set


class ModuleDependencyError(ValueError):
    status_code = 400


class UnknownModuleError(ModuleDependencyError):
    status_code = 404


class DependencyCycleError(ModuleDependencyError):
    pass


class MissingDependenciesError(ModuleDependencyError):
    def __init__(self, missing: Dict[str, List[str]]):
        self.missing = missing
        details = "; ".join(f"{name} requires {', '.join(deps)}" for name, deps in sorted(missing.items()))
        super().__init__(f"Missing required modules: {details}")


class ActiveDependentsError(ModuleDependencyError):
    status_code = 409

    def __init__(self, dependents: Dict[str, List[str]]):
        self.dependents = dependents
        details = "; ".join(f"{name} is required by {', '.join(deps)}" for name, deps in sorted(dependents.items()))
        super().__init__(f"Active modules depend on this change: {details}")


def build_graph(modules: Iterable[dict]) -> Dict[str, List[str]]:
    """module name -> names it requires"""
    return {m["name"]: list(m.get("required_modules") or []) for m in modules}


def _check_known(names: Iterable[str], graph: Dict[str, List[str]]) -> None:
    unknown = sorted(n for n in names if n not in graph)
    if unknown:
        raise UnknownModuleError(f"Unknown modules: {', '.join(unknown)}")


def topological_order(names: Iterable[str], graph: Dict[str, List[str]]) -> List[str]:
    """
    Dependencies-first order of the given modules, restricted to that set.
    Raises DependencyCycleError when the requirements loop.
    """
    wanted = set(names)
    _check_known(wanted, graph)

    ordered: List[str] = []
    done: Set[str] = set()
    visiting: List[str] = []

    def visit(name: str) -> None:
        if name in done:
            return
        if name in visiting:
            cycle = visiting[visiting.index(name):] + [name]
            raise DependencyCycleError(f"Circular module dependency: {' -> '.join(cycle)}")
        visiting.append(name)
        for dep in graph.get(name, []):
            if dep in graph:
                visit(dep)
        visiting.pop()
        done.add(name)
        if name in wanted:
            ordered.append(name)

    for name in sorted(wanted):
        visit(name)
    return ordered


def missing_dependencies(name: str, graph: Dict[str, List[str]], active: Iterable[str]) -> List[str]:
    active = set(active)
    return [dep for dep in graph.get(name, []) if dep not in active]


def activation_order(targets: Iterable[str], graph: Dict[str, List[str]], active: Iterable[str]) -> List[str]:
    """Modules to switch on, dependencies first; every requirement must be active or requested"""
    targets = set(targets)
    active = set(active)
    order = topological_order(targets, graph)

    available = active | targets
    missing = {}
    for name in order:
        gaps = missing_dependencies(name, graph, available)
        if gaps:
            missing[name] = gaps
    if missing:
        raise MissingDependenciesError(missing)

    return [name for name in order if name not in active]


def active_dependents(name: str, graph: Dict[str, List[str]], active: Iterable[str]) -> List[str]:
    """Active modules that need `name`, directly or through other active modules"""
    active = set(active)
    found: Set[str] = set()
    frontier = [name]
    while frontier:
        current = frontier.pop()
        for candidate, requires in graph.items():
            if candidate in active and current in requires and candidate not in found and candidate != name:
                found.add(candidate)
                frontier.append(candidate)
    return sorted(found)


def find_conflicts(targets: Iterable[str], graph: Dict[str, List[str]], active: Iterable[str]) -> Dict[str, List[str]]:
    """For each target, the active modules outside the target set that would lose a requirement"""
    targets = set(targets)
    _check_known(targets, graph)
    conflicts = {}
    for name in sorted(targets):
        dependents = [d for d in active_dependents(name, graph, active) if d not in targets]
        if dependents:
            conflicts[name] = dependents
    return conflicts


def deactivation_order(
    targets: Iterable[str],
    graph: Dict[str, List[str]],
    active: Iterable[str],
    cascade: bool = False,
) -> List[str]:
    """
    Modules to switch off, dependents first. Without cascade, active dependents
    outside the request raise ActiveDependentsError; with cascade they are
    switched off too.
    """
    targets = set(targets)
    active = set(active)
    conflicts = find_conflicts(targets, graph, active)
    if conflicts and not cascade:
        raise ActiveDependentsError(conflicts)

    to_switch_off = {name for name in targets if name in active}
    for dependents in conflicts.values():
        to_switch_off.update(dependents)

    return list(reversed(topological_order(to_switch_off, graph)))
