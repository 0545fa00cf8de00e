"""Demo registry: the closed table from demo name to demo routine.

The table is built once at import time from a static list and exposed
read-only. Adding a demo means adding a line to ``_ENTRIES``; there is no
runtime registration API.

Invariants:
    - Names are unique, non-empty and contain no whitespace
    - Every name maps to a callable taking no arguments
    - Lookups are case-sensitive (``pointers`` is not ``Pointers``)
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from lessons.basics import constants, control_flow, functions, operators, pointers, scope
from lessons.chain import block_sync, blockchain_io, comparison
from lessons.concurrency import channels, goroutines
from lessons.containers import arrays, maps, ranges, slices
from lessons.datatypes import conversion, interfaces, structs, visibility, visibility_usage
from lessons.orm import basics as orm_basics
from lessons.orm import relationships as orm_relationships
from lessons.web import auth, docs, files, matching, middleware, routes, validation

DemoFn = Callable[[], None]


@dataclass(frozen=True)
class DemoEntry:
    """A registered demo routine plus the text shown for it in the help."""

    name: str
    run: DemoFn
    category: str
    summary: str = ""


_ENTRIES: list[DemoEntry] = [
    # basics
    DemoEntry("Pointers", pointers.pointers_demo, "basics", "references, identity and mutation"),
    DemoEntry("Functions", functions.functions_demo, "basics", "parameters, defaults, multiple returns"),
    DemoEntry("Closure", functions.closure_demo, "basics", "captured variables and late binding"),
    DemoEntry("Method", functions.method_demo, "basics", "bound methods, class and static methods"),
    DemoEntry("IfStatement", control_flow.if_statement_demo, "basics", "if / elif / else and truthiness"),
    DemoEntry("SwitchStatement", control_flow.switch_statement_demo, "basics", "match statement patterns"),
    DemoEntry("ForLoop", control_flow.for_loop_demo, "basics", "for, while and enumerate"),
    DemoEntry("Break", control_flow.break_demo, "basics", "leaving loops early"),
    DemoEntry("Continue", control_flow.continue_demo, "basics", "skipping iterations"),
    DemoEntry("Goto", control_flow.goto_demo, "basics", "structured replacements for goto"),
    DemoEntry("LocalVariable", scope.local_variable_demo, "basics", "function scope and shadowing"),
    DemoEntry("GlobalVariable", scope.global_variable_demo, "basics", "module globals and nonlocal"),
    DemoEntry("Constants", constants.constants_demo, "basics", "Final names and module constants"),
    DemoEntry("Enums", constants.enums_demo, "basics", "Enum, IntEnum, Flag and auto()"),
    DemoEntry("ArithmeticOperators", operators.arithmetic_operators_demo, "basics", "+ - * / // % **"),
    DemoEntry("Operators", operators.operators_demo, "basics", "comparison, logical, bitwise, walrus"),
    # containers
    DemoEntry("ArrayDeclaration", arrays.array_declaration_demo, "containers", "tuples and array.array"),
    DemoEntry("ArrayAccess", arrays.array_access_demo, "containers", "indexing and bounds"),
    DemoEntry("MultidimensionalArray", arrays.multidimensional_array_demo, "containers", "nested sequences"),
    DemoEntry("ArrayAsParameter", arrays.array_as_parameter_demo, "containers", "copies vs shared arguments"),
    DemoEntry("SliceDeclaration", slices.slice_declaration_demo, "containers", "lists and slice syntax"),
    DemoEntry("SliceUsage", slices.slice_usage_demo, "containers", "append, extend, insert, delete"),
    DemoEntry("SliceUnderlyingPrinciple", slices.slice_underlying_principle_demo, "containers", "over-allocation and views"),
    DemoEntry("MapDeclaration", maps.map_declaration_demo, "containers", "dict literals and constructors"),
    DemoEntry("MapUsage", maps.map_usage_demo, "containers", "get, setdefault, pop, merge"),
    DemoEntry("MapAsParameter", maps.map_as_parameter_demo, "containers", "dicts are passed by reference"),
    DemoEntry("MapConcurrent", maps.map_concurrent_demo, "containers", "lock-protected dict across threads"),
    DemoEntry("RangeString", ranges.range_string_demo, "containers", "iterating characters and bytes"),
    DemoEntry("RangeArraySlice", ranges.range_array_slice_demo, "containers", "enumerate, zip, reversed"),
    DemoEntry("RangeChannel", ranges.range_channel_demo, "containers", "iterating a closed queue"),
    DemoEntry("RangeMap", ranges.range_map_demo, "containers", "keys, values, items, sorted"),
    # datatypes
    DemoEntry("NumericConversion", conversion.numeric_conversion_demo, "datatypes", "int, float, Decimal, overflow"),
    DemoEntry("StringConversion", conversion.string_conversion_demo, "datatypes", "str <-> numbers and bytes"),
    DemoEntry("InterfaceConversion", conversion.interface_conversion_demo, "datatypes", "isinstance and type narrowing"),
    DemoEntry("StructConversion", conversion.struct_conversion_demo, "datatypes", "dataclass <-> dict <-> JSON"),
    DemoEntry("InterfaceBasic", interfaces.interface_basic_demo, "datatypes", "typing.Protocol basics"),
    DemoEntry("InterfaceImplementation", interfaces.interface_implementation_demo, "datatypes", "abstract base classes"),
    DemoEntry("InterfaceReceiver", interfaces.interface_receiver_demo, "datatypes", "mutating vs copying methods"),
    DemoEntry("InterfaceNesting", interfaces.interface_nesting_demo, "datatypes", "composing protocols"),
    DemoEntry("InterfaceEmpty", interfaces.interface_empty_demo, "datatypes", "object and Any"),
    DemoEntry("AnonymousStruct", structs.anonymous_struct_demo, "datatypes", "namedtuple and SimpleNamespace"),
    DemoEntry("NestedStruct", structs.nested_struct_demo, "datatypes", "composition and embedding"),
    DemoEntry("StructMethods", structs.struct_methods_demo, "datatypes", "dataclass methods and properties"),
    DemoEntry("StructTags", structs.struct_tags_demo, "datatypes", "field metadata and pydantic aliases"),
    DemoEntry("RealWorldExample", structs.real_world_example_demo, "datatypes", "a small order model"),
    DemoEntry("LowercaseStruct", visibility.lowercase_struct_demo, "datatypes", "_names, __all__ and name mangling"),
    DemoEntry("CrossFileUsage", visibility_usage.cross_file_usage_demo, "datatypes", "internal names across modules"),
    # concurrency
    DemoEntry("Goroutine", goroutines.goroutine_demo, "concurrency", "threads, races and locks"),
    DemoEntry("Channel", channels.channel_demo, "concurrency", "queue.Queue as a channel"),
    DemoEntry("LockAndChannel", channels.lock_and_channel_demo, "concurrency", "when to share and when to send"),
    # blockchain
    DemoEntry("BlockchainIO", blockchain_io.blockchain_io_demo, "blockchain", "concurrent RPC fan-out with asyncio"),
    DemoEntry("BlockSyncNecessity", block_sync.block_sync_necessity_demo, "blockchain", "why indexers sync blocks"),
    DemoEntry("GoVsNodejs", comparison.go_vs_nodejs_demo, "blockchain", "threads vs asyncio for RPC work"),
    # web
    DemoEntry("BasicRoutes", routes.basic_routes_demo, "web", "FastAPI route registration"),
    DemoEntry("RESTfulRoutes", routes.restful_routes_demo, "web", "CRUD verbs on one resource"),
    DemoEntry("PathParameter", routes.path_parameter_demo, "web", "typed path parameters"),
    DemoEntry("QueryParameter", routes.query_parameter_demo, "web", "optional and defaulted query params"),
    DemoEntry("JSONBinding", routes.json_binding_demo, "web", "request bodies as pydantic models"),
    DemoEntry("RouteGroup", routes.route_group_demo, "web", "APIRouter prefixes"),
    DemoEntry("VersionControl", routes.version_control_demo, "web", "/v1 and /v2 side by side"),
    DemoEntry("RegexRoute", matching.regex_route_demo, "web", "path converters vs Path(pattern=)"),
    DemoEntry("RouteConflict", matching.route_conflict_demo, "web", "declaration order of overlapping paths"),
    DemoEntry("StaticFiles", files.static_files_demo, "web", "StaticFiles mounts and FileResponse"),
    DemoEntry("FormBinding", files.form_binding_demo, "web", "form fields, form models and uploads"),
    DemoEntry("CustomValidation", validation.custom_validation_demo, "web", "field and model validators"),
    DemoEntry("BuiltinValidationTags", validation.builtin_validation_tags_demo, "web", "built-in field constraints"),
    DemoEntry("ValidationErrorHandling", validation.validation_error_handling_demo, "web", "custom 422 handler"),
    DemoEntry("UnifiedResponse", validation.unified_response_demo, "web", "one envelope for every reply"),
    DemoEntry("SensitiveDataFilter", validation.sensitive_data_filter_demo, "web", "excluded, secret and masked fields"),
    DemoEntry("MiddlewareFlow", middleware.middleware_flow_demo, "web", "logger -> CORS -> JWT -> RBAC chain"),
    DemoEntry("MiddlewareRoute", matching.middleware_route_demo, "web", "app, router and route scoped hooks"),
    DemoEntry("CORSMiddleware", middleware.cors_middleware_demo, "web", "preflight and allowed origins"),
    DemoEntry("MiddlewareTest", middleware.middleware_test_demo, "web", "testing middleware in-process"),
    DemoEntry("MiddlewareDebug", middleware.middleware_debug_demo, "web", "request ids and timing traces"),
    DemoEntry("MiddlewareBestPractices", middleware.middleware_best_practices_demo, "web", "a production middleware stack"),
    DemoEntry("RateLimit", middleware.rate_limit_demo, "web", "fixed-window limiter and 429"),
    DemoEntry("JWTAuth", auth.jwt_auth_demo, "web", "HS256 tokens and bearer dependency"),
    DemoEntry("GinRouter", auth.gin_router_demo, "web", "public, authed and admin route groups"),
    DemoEntry("SwaggerIntegration", docs.swagger_integration_demo, "web", "generated OpenAPI, /docs and /redoc"),
    DemoEntry("SwaggerAnnotations", docs.swagger_annotations_demo, "web", "summaries, parameters and responses"),
    DemoEntry("SwaggerSecurity", docs.swagger_security_demo, "web", "docs behind HTTP Basic, bearer API"),
    # orm
    DemoEntry("OrmBasics", orm_basics.orm_basics_demo, "orm", "models, sessions and CRUD"),
    DemoEntry("OrmDatabaseConfig", orm_basics.orm_database_config_demo, "orm", "engine and pool settings"),
    DemoEntry("OrmRelationships", orm_relationships.orm_relationships_demo, "orm", "one-to-many and many-to-many"),
    DemoEntry("OrmQueryOptimization", orm_relationships.orm_query_optimization_demo, "orm", "indexes, columns, pagination"),
    DemoEntry("OrmPreload", orm_relationships.orm_preload_demo, "orm", "N+1 queries vs selectinload"),
]


def build_registry(entries: Iterable[DemoEntry]) -> Mapping[str, DemoEntry]:
    """Build the read-only name -> entry table.

    Raises ``ValueError`` for a duplicate or malformed name or a routine
    that is not callable, so a bad table fails at import.
    """
    table: dict[str, DemoEntry] = {}
    for entry in entries:
        name = entry.name
        if not name or any(ch.isspace() for ch in name):
            raise ValueError(f"invalid demo name: {name!r}")
        if name in table:
            raise ValueError(f"duplicate demo name: {name}")
        if not callable(entry.run):
            raise ValueError(f"demo {name} is not callable")
        table[name] = entry
    return MappingProxyType(table)


DEMOS: Mapping[str, DemoEntry] = build_registry(_ENTRIES)


def lookup(name: str) -> tuple[DemoFn | None, bool]:
    """Return ``(routine, True)`` for a registered name, else ``(None, False)``."""
    entry = DEMOS.get(name)
    if entry is None:
        return None, False
    return entry.run, True


def demo_names() -> list[str]:
    """All registered names, alphabetical."""
    return sorted(DEMOS)


def iter_demos() -> Iterator[DemoEntry]:
    for name in demo_names():
        yield DEMOS[name]
