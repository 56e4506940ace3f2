"""Project loading, block graph construction and control-flow reconstruction."""

from .BlockModel import (
    BODY_INPUTS,
    Block,
    BlockInput,
    InputKind,
    LiteralInput,
    RawInput,
    ReferenceInput,
    ReporterInput,
    body_target,
    decode_input,
    field_entry,
    parse_blocks,
)
from .ExpressionWalker import REPORTER_TABLE, ExpressionWalker, make_literal
from .GraphDriver import BlockGraph, GraphBuilder, build_block_graph
from .ProjectLoader import (
    Project,
    Target,
    cache_path,
    get_project_id,
    load_project,
    parse_project,
)
from .Unraveler import TraversalContext, Unraveler, unravel_blocks

__all__ = [
    "BODY_INPUTS",
    "Block",
    "BlockInput",
    "InputKind",
    "LiteralInput",
    "RawInput",
    "ReferenceInput",
    "ReporterInput",
    "body_target",
    "decode_input",
    "field_entry",
    "parse_blocks",
    "REPORTER_TABLE",
    "ExpressionWalker",
    "make_literal",
    "BlockGraph",
    "GraphBuilder",
    "build_block_graph",
    "Project",
    "Target",
    "cache_path",
    "get_project_id",
    "load_project",
    "parse_project",
    "TraversalContext",
    "Unraveler",
    "unravel_blocks",
]
