"""
Route contracts: builder, contract types, errors and OpenAPI export.
"""

from crud_contracts.routes.contract import (
    INPUT_PARTS,
    InputSpec,
    OutputSpec,
    RouteContract,
    RouteMetadata,
    path_parameters,
)
from crud_contracts.routes.builders import InputBuilder, OutputBuilder, PathParam, param
from crud_contracts.routes.route_builder import RouteBuilder, route
from crud_contracts.routes.errors import (
    CommonErrors,
    ErrorBuilder,
    ErrorDefinition,
    error,
)
from crud_contracts.routes.openapi import build_openapi

__all__ = [
    # contract
    "INPUT_PARTS",
    "InputSpec",
    "OutputSpec",
    "RouteContract",
    "RouteMetadata",
    "path_parameters",
    # builders
    "InputBuilder",
    "OutputBuilder",
    "PathParam",
    "param",
    "RouteBuilder",
    "route",
    # errors
    "CommonErrors",
    "ErrorBuilder",
    "ErrorDefinition",
    "error",
    # openapi
    "build_openapi",
]
