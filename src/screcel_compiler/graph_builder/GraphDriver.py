#!/usr/bin/env python3
"""
GraphDriver.py — Scratch block map to semantic graph

This module converts the flat block map of one Scratch target into a
NetworkX directed graph. The graph keeps every block record as a node
attribute and makes the pointers between blocks explicit as typed edges,
so later passes can walk chains and bodies without re-reading raw tuples.

Architecture:
- GraphBuilder: Creates the MultiDiGraph from decoded Block records
- BlockGraph: Read-only view used by the expression walker and unraveler
- GraphML export: Scalar-only copy of the graph for debugging/visualization
"""

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Union
import networkx as nx

from ..diagnostics import Diagnostics, codes
from .BlockModel import BODY_INPUTS, Block, ReporterInput, body_target

# ----------------------------------------------------------------------
# Type Definitions
# ----------------------------------------------------------------------
NodeId = str  # Block id, unique within one target
Graph = nx.MultiDiGraph  # Directed multigraph; two blocks may be linked by several pointers


# ----------------------------------------------------------------------
# BlockGraph - read-only view over a built graph
# ----------------------------------------------------------------------
class BlockGraph:
    """
    Block graph of one target.

    Node order is the enumeration order of the block map the graph was built
    from; it decides the order of reconstructed scripts.

    Edge types:
    - 'next': chain successor
    - 'parent': enclosing or previous block
    - 'substack': first block of a nested body (edge attribute ``input``)
    - 'reporter': reporter block evaluated as a value (edge attribute ``input``)
    """

    def __init__(self, graph: Graph, name: str = ""):
        self.graph = graph
        self.name = name

    def __contains__(self, node_id) -> bool:
        return isinstance(node_id, str) and node_id in self.graph

    def __len__(self) -> int:
        return self.graph.number_of_nodes()

    def block(self, node_id: NodeId) -> Optional[Block]:
        """Return the Block stored at ``node_id`` or None when absent."""
        if node_id not in self:
            return None
        return self.graph.nodes[node_id]["block"]

    def blocks(self) -> Iterator[Tuple[NodeId, Block]]:
        """Iterate (id, Block) pairs in enumeration order."""
        for nid, data in self.graph.nodes(data=True):
            yield nid, data["block"]

    def top_level_ids(self) -> List[NodeId]:
        return [nid for nid, data in self.graph.nodes(data=True) if data.get("top_level")]

    def _get_children(self, node_id: NodeId, edge_type: Optional[str] = None) -> List[NodeId]:
        """Get successors connected by a specific edge type (all when None)."""
        children = []
        for _, target, data in self.graph.out_edges(node_id, data=True):
            if edge_type is None or data.get("type") == edge_type:
                children.append(target)
        return children

    def next_of(self, node_id: NodeId) -> Optional[NodeId]:
        """Chain successor of ``node_id``; None at the end of a chain or on a dangling pointer."""
        if node_id not in self:
            return None
        successors = self._get_children(node_id, "next")
        return successors[0] if successors else None

    def to_graphml(self, path: Union[str, Path]) -> Path:
        """
        Write the graph as GraphML.

        GraphML only stores scalar attributes, so the Block records are
        flattened to opcode/flags/position first.
        """
        export = nx.MultiDiGraph(name=self.name)
        for nid, data in self.graph.nodes(data=True):
            block: Block = data["block"]
            attrs = {
                "opcode": block.opcode,
                "top_level": block.top_level,
                "shadow": block.shadow,
            }
            if block.x is not None:
                attrs["x"] = float(block.x)
            if block.y is not None:
                attrs["y"] = float(block.y)
            export.add_node(nid, **attrs)
        for src, dst, data in self.graph.edges(data=True):
            attrs = {"type": data.get("type", "")}
            if data.get("input"):
                attrs["input"] = data["input"]
            export.add_edge(src, dst, **attrs)
        path = Path(path)
        nx.write_graphml(export, str(path))
        return path


# ----------------------------------------------------------------------
# GraphBuilder Class - block map to graph converter
# ----------------------------------------------------------------------
class GraphBuilder:
    """
    Converts the decoded block map of one target into a BlockGraph.

    Key Design Principles:
    1. Order preserving: nodes are added in block-map order
    2. No phantom nodes: an edge is only added when both ends exist, so a
       dangling pointer never materializes an empty node
    3. Tolerant: malformed pointers are reported, never raised
    """

    def __init__(self, blocks: Dict[NodeId, Block], name: str = "",
                 diagnostics: Optional[Diagnostics] = None):
        self.blocks = blocks
        self.name = name
        self.diagnostics = diagnostics or Diagnostics.collecting()
        self.graph: Graph = nx.MultiDiGraph(name=name)

    # ===================================================================
    # SECTION 1: Node and Edge Management
    # ===================================================================

    def _add_node(self, block: Block) -> NodeId:
        self.graph.add_node(
            block.id,
            block=block,
            opcode=block.opcode,
            top_level=block.top_level,
            shadow=block.shadow,
        )
        return block.id

    def _link(self, src: NodeId, dst: NodeId, edge_type: str, **attrs) -> bool:
        """
        Create a typed edge between two existing blocks.

        Returns False (and adds nothing) when ``dst`` is not a block of this target.
        """
        if not isinstance(dst, str) or dst not in self.graph:
            return False
        self.graph.add_edge(src, dst, type=edge_type, **attrs)
        return True

    # ===================================================================
    # SECTION 2: Main Build Process
    # ===================================================================

    def build(self) -> BlockGraph:
        """
        Build the complete block graph.

        Process:
        1. Add every block as a node (enumeration order)
        2. Link next/parent pointers
        3. Link body inputs and reporter inputs
        """
        for block in self.blocks.values():
            self._add_node(block)

        for block in self.blocks.values():
            self._link_pointers(block)
            self._link_inputs(block)

        return BlockGraph(self.graph, self.name)

    def _link_pointers(self, block: Block):
        for attr in ("next", "parent"):
            target = getattr(block, attr)
            if target is None:
                continue
            if not self._link(block.id, target, attr):
                self.diagnostics.report(codes.DANGLING_POINTER, node=block.id,
                                        attr=attr, symbol=target, target=self.name)

    def _link_inputs(self, block: Block):
        for name, block_input in block.inputs.items():
            if name in BODY_INPUTS:
                target = body_target(block_input)
                if target is not None:
                    self._link(block.id, target, "substack", input=name)
            elif isinstance(block_input, ReporterInput):
                self._link(block.id, block_input.target, "reporter", input=name)


def build_block_graph(blocks: Dict[NodeId, Block], name: str = "",
                      diagnostics: Optional[Diagnostics] = None) -> BlockGraph:
    """Convenience wrapper around GraphBuilder."""
    return GraphBuilder(blocks, name, diagnostics).build()
