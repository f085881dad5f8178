"""PostgreSQL type OID to type name mapping.

Names follow pg_type.typname; array types carry the leading underscore
PostgreSQL gives them. Unknown OIDs resolve to ``oid:<id>``.
"""

from __future__ import annotations

from types import MappingProxyType

TYPE_NAMES = MappingProxyType(
    {
        16: "bool",
        17: "bytea",
        18: "char",
        19: "name",
        20: "int8",
        21: "int2",
        23: "int4",
        25: "text",
        26: "oid",
        114: "json",
        142: "xml",
        199: "_json",
        700: "float4",
        701: "float8",
        790: "money",
        1000: "_bool",
        1001: "_bytea",
        1002: "_char",
        1003: "_name",
        1005: "_int2",
        1007: "_int4",
        1009: "_text",
        1014: "_bpchar",
        1015: "_varchar",
        1016: "_int8",
        1021: "_float4",
        1022: "_float8",
        1042: "bpchar",
        1043: "varchar",
        1082: "date",
        1083: "time",
        1114: "timestamp",
        1115: "_timestamp",
        1182: "_date",
        1183: "_time",
        1184: "timestamptz",
        1185: "_timestamptz",
        1186: "interval",
        1187: "_interval",
        1231: "_numeric",
        1263: "_cstring",
        1266: "timetz",
        1700: "numeric",
        2950: "uuid",
        2951: "_uuid",
        3802: "jsonb",
        3807: "_jsonb",
    }
)


def resolve_type_name(type_oid: int) -> str:
    """Return the type name for ``type_oid``, or ``oid:<id>`` if unknown."""
    return TYPE_NAMES.get(type_oid, f"oid:{type_oid}")
