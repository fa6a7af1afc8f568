"""Plain-text and JSON renderings of analysis :class:`Results`."""

from __future__ import annotations

import json

from javadeps.graph import Results
from javadeps.model import PackageDirectory


def cycle_edges(results: Results) -> list[tuple[PackageDirectory, PackageDirectory]]:
    """Return the distinct package edges that take part in a cycle, in order."""
    edges: dict[tuple[PackageDirectory, PackageDirectory], None] = {}
    for cycle in results.package_cycles:
        for first, second in zip(cycle, cycle[1:]):
            edges[(first, second)] = None
    return list(edges)


def format_cycle(cycle: tuple[PackageDirectory, ...]) -> str:
    return " -> ".join(str(package) for package in cycle)


def format_text(results: Results) -> str:
    """Human-friendly report: cycles, the file edges behind them, externals."""
    lines = [f"Found cycle: {format_cycle(cycle)}" for cycle in results.package_cycles]

    for first, second in cycle_edges(results):
        lines.append(f"From {first} to {second}:")
        details = results.file_dependency_details(first, second)
        for source in sorted(details, key=lambda u: u.path):
            for target in sorted(details[source], key=lambda u: u.path):
                lines.append(f"   {source} -> {target}")

    lines.extend(f"External package: {package}" for package in results.external_packages)
    return "\n".join(lines)


def to_json(results: Results) -> str:
    """Serialize packages, their dependencies, cycles and externals."""
    out = {
        "packages": [
            {
                "name": package.package_name,
                "directory": str(package.path),
                "files": sorted(str(u.path) for u in results.files_in_package(package)),
                "dependencies": sorted(
                    str(dep) for dep in results.package_graph.get(package, ())
                ),
                "externalPackages": sorted(
                    p.name for p in results.external_package_dependencies(package)
                ),
            }
            for package in results.packages
        ],
        "cycles": [
            {
                "packages": [str(package) for package in cycle],
                "edges": [
                    {
                        "from": str(first),
                        "to": str(second),
                        "files": [
                            {"from": str(source.path), "to": str(target.path)}
                            for source, targets in sorted(
                                results.file_dependency_details(first, second).items(),
                                key=lambda item: item[0].path,
                            )
                            for target in sorted(targets, key=lambda u: u.path)
                        ],
                    }
                    for first, second in zip(cycle, cycle[1:])
                ],
            }
            for cycle in results.package_cycles
        ],
        "externalPackages": [package.name for package in results.external_packages],
        "externalClasses": [
            {"name": cls.name, "simpleName": cls.simple_name, "package": cls.package.name}
            for cls in results.external_classes
        ],
    }
    return json.dumps(out, indent=2)
