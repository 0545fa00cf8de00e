"""Type conversion, interfaces and structs."""
