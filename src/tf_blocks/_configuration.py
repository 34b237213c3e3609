"""
An ordered collection of top-level Terraform blocks.

Example:
    Building a configuration::

        from tf_blocks import Configuration
        from tf_blocks.aws import DefaultVpc, SecurityGroup

        config = Configuration()
        vpc = config.add(DefaultVpc("default"))
        sg = config.add(SecurityGroup("web", name="web", vpc_id=vpc))

        config.dependencies(sg)        # ['aws_default_vpc.default']
        config.dependency_order()      # [<DefaultVpc ...>, <SecurityGroup ...>]
"""

import logging
from typing import Any, Iterable, Iterator

from tf_blocks._errors import DependencyCycleError
from tf_blocks._introspection import iter_references
from tf_blocks._model import (
    Output,
    Provider,
    Resource,
    TerraformSettings,
    Variable,
)

__all__ = ["Configuration"]

logger = logging.getLogger(__name__)


class Configuration:
    """Top-level blocks in declaration order.

    Blocks are anything with an ``address``: resources, data sources,
    variables, outputs, providers and the terraform settings block.
    """

    def __init__(self, blocks: Iterable[Any] = ()) -> None:
        self._blocks: list[Any] = []
        self.extend(blocks)

    def add(self, block: Any) -> Any:
        """Append a block and return it.

        Raises:
            TypeError: If ``block`` is not an addressable block.
        """
        if not hasattr(block, "address") or not hasattr(block, "body"):
            raise TypeError(f"Not a Terraform block: {block!r}")
        self._blocks.append(block)
        logger.debug("Added %s", block.address)
        return block

    def extend(self, blocks: Iterable[Any]) -> None:
        for block in blocks:
            self.add(block)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return self.find(item) is not None
        return any(block is item for block in self._blocks)

    def __repr__(self) -> str:
        return f"<Configuration with {len(self._blocks)} blocks>"

    def find(self, address: str) -> Any | None:
        """Return the first block declared at ``address``, or None."""
        for block in self._blocks:
            if block.address == address:
                return block
        return None

    @property
    def terraform(self) -> TerraformSettings | None:
        for block in self._blocks:
            if isinstance(block, TerraformSettings):
                return block
        return None

    @property
    def providers(self) -> list[Provider]:
        return [b for b in self._blocks if isinstance(b, Provider)]

    @property
    def variables(self) -> list[Variable]:
        return [b for b in self._blocks if isinstance(b, Variable)]

    @property
    def resources(self) -> list[Resource]:
        """Resources and data sources, in declaration order."""
        return [b for b in self._blocks if isinstance(b, Resource)]

    @property
    def outputs(self) -> list[Output]:
        return [b for b in self._blocks if isinstance(b, Output)]

    def dependencies(self, block: Any) -> list[str]:
        """Return addresses of the resources and data sources ``block`` uses.

        Includes ``depends_on`` entries given as address strings. Order
        follows first use; duplicates are dropped.
        """
        found: list[str] = []
        for site in iter_references(block):
            if isinstance(site.target, Resource) and site.address not in found:
                found.append(site.address)
        if isinstance(block, Resource):
            for dep in block.depends_on:
                if isinstance(dep, str) and dep not in found:
                    found.append(dep)
        return found

    def dependency_graph(self) -> dict[str, set[str]]:
        """Map each resource address to the declared resources it uses."""
        declared = {r.address for r in self.resources}
        graph: dict[str, set[str]] = {}
        for res in self.resources:
            deps = {dep for dep in self.dependencies(res) if dep in declared}
            graph.setdefault(res.address, set()).update(deps)
        return graph

    def dependency_order(self) -> list[Resource]:
        """Return resources and data sources so that dependencies come first.

        Among blocks whose dependencies are satisfied, the one declared
        first wins, so an already ordered configuration keeps its order.

        Raises:
            DependencyCycleError: If resources reference each other in a cycle.
        """
        graph = self.dependency_graph()
        by_address: dict[str, Resource] = {}
        for res in self.resources:
            by_address.setdefault(res.address, res)

        remaining = list(graph)
        done: set[str] = set()
        order: list[Resource] = []

        while remaining:
            ready = next((a for a in remaining if graph[a] <= done), None)
            if ready is None:
                raise DependencyCycleError(_find_cycle(graph, remaining))
            remaining.remove(ready)
            done.add(ready)
            order.append(by_address[ready])

        return order


def _find_cycle(graph: dict[str, set[str]], remaining: list[str]) -> list[str]:
    """Return one cycle among ``remaining``, first node repeated at the end."""
    pending = set(remaining)
    # Every remaining node has an unfinished dependency, so walking
    # dependencies from any of them must revisit a node.
    path: list[str] = []
    seen: dict[str, int] = {}
    node = remaining[0]
    while node not in seen:
        seen[node] = len(path)
        path.append(node)
        node = sorted(graph[node] & pending)[0]
    return path[seen[node]:] + [node]
